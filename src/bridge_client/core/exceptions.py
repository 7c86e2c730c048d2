"""
Иерархия исключений Bridge Client.

Классификация:
- BridgeError (kind + retryable) - классифицированная ошибка запроса
- SessionLockedError - отдельный сигнал протокола, НЕ BridgeError
- ConfigurationError - невалидная конфигурация
"""

from enum import Enum
from typing import Any, Dict, Optional

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BASE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class BridgeClientException(Exception):
    """Базовое исключение Bridge Client."""

    retryable: bool = False
    fatal: bool = False

    def __init__(self, message: str, **kwargs):
        self.message = message
        super().__init__(message)


class ErrorKind(str, Enum):
    """Закрытый набор видов ошибок, которые видит вызывающий код."""
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    RATE_LIMITED = "RATE_LIMITED"
    SERVER_ERROR = "SERVER_ERROR"
    CLIENT_ERROR = "CLIENT_ERROR"
    PARSE_ERROR = "PARSE_ERROR"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# КЛАССИФИЦИРОВАННЫЕ ОШИБКИ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class BridgeError(BridgeClientException):
    """
    Классифицированная ошибка запроса к bridge.

    Args:
        message: Сообщение об ошибке
        kind: Вид ошибки (ErrorKind)
        http_status: HTTP статус (если был ответ)
        retryable: Можно ли повторить запрос
        correlation_id: X-Request-Id логического запроса
        retry_after_sec: Секунды до повтора (только RATE_LIMITED)
        code: Значение поля ``code`` из тела ошибки

    Examples:
        >>> try:
        ...     await client.status()
        ... except BridgeError as e:
        ...     if e.kind is ErrorKind.RATE_LIMITED:
        ...         show_countdown(e.retry_after_sec)
    """

    kind: ErrorKind = ErrorKind.CLIENT_ERROR

    def __init__(
        self,
        message: str,
        *,
        kind: Optional[ErrorKind] = None,
        http_status: Optional[int] = None,
        retryable: Optional[bool] = None,
        correlation_id: Optional[str] = None,
        retry_after_sec: Optional[int] = None,
        code: Optional[str] = None,
    ):
        if kind is not None:
            self.kind = kind
        if retryable is not None:
            self.retryable = retryable
        self.fatal = not self.retryable
        self.http_status = http_status
        self.correlation_id = correlation_id
        self.retry_after_sec = retry_after_sec
        self.code = code
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Структурированное представление для UI слоя."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "httpStatus": self.http_status,
            "retryable": self.retryable,
            "correlationId": self.correlation_id,
            "retryAfterSec": self.retry_after_sec,
            "code": self.code,
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(kind={self.kind.value}, "
            f"http_status={self.http_status}, retryable={self.retryable}, "
            f"correlation_id={self.correlation_id!r})"
        )


class NetworkError(BridgeError):
    """
    Сетевая ошибка (connection refused, DNS и т.п.).

    Retryable только для идемпотентных запросов.
    """
    kind = ErrorKind.NETWORK_ERROR


class TimeoutError(NetworkError):
    """
    Таймаут запроса.

    Args:
        message: Сообщение
        timeout_ms: Значение таймаута
    """
    kind = ErrorKind.TIMEOUT

    def __init__(self, message: str, *, timeout_ms: Optional[int] = None, **kwargs):
        self.timeout_ms = timeout_ms
        if timeout_ms:
            message += f" (timeout: {timeout_ms}ms)"
        super().__init__(message, **kwargs)


class UnauthorizedError(BridgeError):
    """401 Unauthorized."""
    kind = ErrorKind.UNAUTHORIZED


class ForbiddenError(BridgeError):
    """403 Forbidden (без кода session_locked)."""
    kind = ErrorKind.FORBIDDEN


class NotFoundError(BridgeError):
    """404 Not Found."""
    kind = ErrorKind.NOT_FOUND


class RateLimitedError(BridgeError):
    """
    429 Rate Limit.

    Никогда не ретраится автоматически: повтор только продлевает блокировку.
    ``retry_after_sec`` всегда число (по умолчанию 60).
    """
    kind = ErrorKind.RATE_LIMITED


class ServerError(BridgeError):
    """5xx ошибка сервера."""
    kind = ErrorKind.SERVER_ERROR
    retryable = True


class ClientError(BridgeError):
    """Прочие 4xx ошибки."""
    kind = ErrorKind.CLIENT_ERROR


class ParseError(BridgeError):
    """
    Невалидное тело успешного (2xx) ответа.

    Args:
        message: Сообщение
        byte_length: Размер тела в байтах
        preview: Начало тела для диагностики
    """
    kind = ErrorKind.PARSE_ERROR

    def __init__(
        self,
        message: str,
        *,
        byte_length: int = 0,
        preview: str = "",
        **kwargs
    ):
        self.byte_length = byte_length
        self.preview = preview
        super().__init__(message, retryable=False, **kwargs)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# СПЕЦИАЛЬНЫЕ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class SessionLockedError(BridgeClientException):
    """
    Сессия identity заблокирована (403 + code "session_locked").

    Намеренно НЕ наследуется от BridgeError: вызывающий код должен
    обрабатывать её отдельно (переход на unlock flow).

    Args:
        message: Сообщение сервера
        correlation_id: X-Request-Id запроса
    """

    fatal = True
    code = "session_locked"
    status_code = 403

    def __init__(
        self,
        message: str = "Identity session is locked",
        correlation_id: Optional[str] = None,
    ):
        self.correlation_id = correlation_id
        super().__init__(message)


class ConfigurationError(BridgeClientException):
    """Ошибка конфигурации."""
    fatal = True
