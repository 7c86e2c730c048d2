# src/bridge_client/utils/sanitizer.py
"""
Маскирование чувствительных данных в логах.

Защищает пароли unlock, bearer токены, apikey, идентификаторы
messaging-сессий и содержимое сообщений от попадания в логи.
"""

import re
from typing import Any, Dict


# Ключи сравниваются без учёта регистра и без "_"/"-",
# поэтому "sessionId", "session_id" и "session-id" совпадают
SENSITIVE_KEYS = {
    'password', 'passwd', 'pwd',
    'token', 'accesstoken', 'refreshtoken', 'bearertoken', 'jwt',
    'secret', 'clientsecret',
    'apikey', 'authorization', 'auth',
    'cookie', 'session', 'sessionid',
    'plaintextb64', 'payloadciphertextb64', 'peerrefencryptedb64',
}

# Free text (error messages, URLs) may still carry secrets inline
SENSITIVE_PATTERNS = [
    re.compile(r"(Bearer\s+)[\w\-.~+/]+=*", re.IGNORECASE),
    re.compile(r"(api[_-]?key[\"']?[\s:=]+[\"']?)[^\s\"'&,;]+", re.IGNORECASE),
    re.compile(r"(password[\"']?[\s:=]+[\"']?)[^\s\"'&,;]+", re.IGNORECASE),
    re.compile(r"(session[_-]?id[\"']?[\s:=]+[\"']?)[^\s\"'&,;]+", re.IGNORECASE),
]


def mask_sensitive_data(data: Any, mask: str = "***REDACTED***") -> Any:
    """
    Рекурсивно маскирует чувствительные данные в словарях, списках, строках.

    Args:
        data: Данные для маскирования
        mask: Строка-заменитель

    Returns:
        Копия данных с замаскированными чувствительными полями

    Examples:
        >>> mask_sensitive_data({"sessionId": "s-1", "limit": 20})
        {'sessionId': '***REDACTED***', 'limit': 20}

        >>> mask_sensitive_data("Bearer abc.def")
        'Bearer ***REDACTED***'
    """
    if isinstance(data, str):
        return _mask_string(data, mask)
    if isinstance(data, dict):
        return _mask_dict(data, mask)
    if isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive_data(item, mask) for item in data)
    # numbers, None and other objects pass through
    return data


def _normalize_key(key: Any) -> str:
    return str(key).lower().replace('_', '').replace('-', '')


def _mask_dict(data: Dict[Any, Any], mask: str) -> Dict[Any, Any]:
    return {
        key: mask if _normalize_key(key) in SENSITIVE_KEYS else mask_sensitive_data(value, mask)
        for key, value in data.items()
    }


def _mask_string(text: str, mask: str) -> str:
    for pattern in SENSITIVE_PATTERNS:
        text = pattern.sub(lambda m: m.group(1) + mask, text)
    return text
