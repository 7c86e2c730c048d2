# src/bridge_client/core/error_handler.py

import asyncio
import json
import logging
import math
import time
from dataclasses import dataclass
from datetime import timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, Mapping, Optional

import httpx

from .exceptions import (
    BridgeError,
    ClientError,
    ErrorKind,
    ForbiddenError,
    NetworkError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    SessionLockedError,
    TimeoutError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

SESSION_LOCKED_CODE = "session_locked"
DEFAULT_RETRY_AFTER_SEC = 60

# Нормальные значения: "60" или "Wed, 21 Oct 2015 07:28:00 GMT"
MAX_HEADER_LENGTH = 100


@dataclass(frozen=True)
class Classification:
    """Результат классификации HTTP статуса."""
    kind: ErrorKind
    retryable: bool


_ERROR_CLASSES = {
    ErrorKind.NETWORK_ERROR: NetworkError,
    ErrorKind.TIMEOUT: TimeoutError,
    ErrorKind.UNAUTHORIZED: UnauthorizedError,
    ErrorKind.FORBIDDEN: ForbiddenError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.RATE_LIMITED: RateLimitedError,
    ErrorKind.SERVER_ERROR: ServerError,
    ErrorKind.CLIENT_ERROR: ClientError,
}


def parse_error_body(text: str) -> Dict[str, Any]:
    """
    Безопасно распарсить тело ошибки ``{error?, message?, code?, retryAfter?}``.

    Возвращает пустой dict, если тело не JSON-объект.
    """
    if not text:
        return {}
    try:
        data = json.loads(text)
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def error_message(status: int, body: Mapping[str, Any]) -> str:
    """Сообщение из тела ошибки или ``HTTP <status>``."""
    for key in ("message", "error"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value
    return f"HTTP {status}"


def _parse_retry_after_header(value: str, now: float) -> Optional[int]:
    """Retry-After: сначала целое число секунд, потом HTTP-date."""
    if len(value) > MAX_HEADER_LENGTH:
        logger.warning(
            f"Retry-After header too long ({len(value)} chars), ignoring"
        )
        return None

    value = value.strip()
    try:
        seconds = int(value)
    except ValueError:
        pass
    else:
        return seconds if seconds >= 0 else None

    try:
        retry_date = parsedate_to_datetime(value)
    except (ValueError, TypeError, IndexError, OverflowError) as e:
        logger.debug(f"Failed to parse Retry-After header '{value}': {e}")
        return None
    if retry_date is None:
        return None
    if retry_date.tzinfo is None:
        # "-0000" означает UTC без указания зоны
        retry_date = retry_date.replace(tzinfo=timezone.utc)
    delta = retry_date.timestamp() - now
    return max(0, int(round(delta)))


def extract_retry_after(
    body: Mapping[str, Any],
    headers: Optional[Mapping[str, str]],
    now: Optional[float] = None,
    default: int = DEFAULT_RETRY_AFTER_SEC,
) -> int:
    """
    Определить паузу после 429.

    Приоритет:
    1. Числовое поле ``retryAfter`` в JSON теле
    2. Заголовок ``Retry-After`` (целое, затем HTTP-date)
    3. Заголовок ``X-RateLimit-Reset`` (epoch секунды)
    4. ``default`` (60)

    Args:
        body: Распарсенное тело ошибки
        headers: Заголовки ответа
        now: Текущее время (epoch секунды)
        default: Значение по умолчанию

    Returns:
        Секунды до повтора
    """
    if now is None:
        now = time.time()

    retry_after = body.get("retryAfter")
    if isinstance(retry_after, (int, float)) and not isinstance(retry_after, bool):
        if math.isfinite(retry_after) and retry_after >= 0:
            return int(round(retry_after))

    if headers:
        if not isinstance(headers, httpx.Headers):
            headers = httpx.Headers(dict(headers))

        header = headers.get("Retry-After")
        if header:
            parsed = _parse_retry_after_header(header, now)
            if parsed is not None:
                return parsed

        reset = headers.get("X-RateLimit-Reset")
        if reset:
            try:
                reset_at = float(reset.strip())
            except ValueError:
                logger.debug(f"Failed to parse X-RateLimit-Reset header '{reset}'")
            else:
                if math.isfinite(reset_at):
                    return max(0, int(round(reset_at - now)))
                logger.debug(f"Ignoring non-finite X-RateLimit-Reset header '{reset}'")

    return default


class ErrorClassifier:
    """Преобразование HTTP статусов и транспортных ошибок в BridgeError."""

    @staticmethod
    def is_session_locked(status: int, body: Mapping[str, Any]) -> bool:
        """403 + code "session_locked"."""
        return status == 403 and body.get("code") == SESSION_LOCKED_CODE

    @staticmethod
    def classify(status: int, body: Optional[Mapping[str, Any]] = None) -> Classification:
        """
        Классифицировать HTTP статус ошибки.

        Raises:
            SessionLockedError: 403 с кодом session_locked
        """
        body = body or {}

        if status == 401:
            return Classification(ErrorKind.UNAUTHORIZED, False)

        elif status == 403:
            if ErrorClassifier.is_session_locked(status, body):
                raise SessionLockedError(error_message(status, body))
            return Classification(ErrorKind.FORBIDDEN, False)

        elif status == 404:
            return Classification(ErrorKind.NOT_FOUND, False)

        elif status == 429:
            # Автоповтор 429 только продлевает блокировку
            return Classification(ErrorKind.RATE_LIMITED, False)

        elif status >= 500:
            return Classification(ErrorKind.SERVER_ERROR, True)

        else:
            return Classification(ErrorKind.CLIENT_ERROR, False)

    @staticmethod
    def build_error(
        status: int,
        body: Mapping[str, Any],
        headers: Optional[Mapping[str, str]] = None,
        correlation_id: Optional[str] = None,
        now: Optional[float] = None,
    ) -> BridgeError:
        """
        Построить BridgeError для non-2xx ответа.

        Raises:
            SessionLockedError: 403 с кодом session_locked
        """
        try:
            classification = ErrorClassifier.classify(status, body)
        except SessionLockedError as e:
            e.correlation_id = correlation_id
            raise

        retry_after_sec = None
        if classification.kind is ErrorKind.RATE_LIMITED:
            retry_after_sec = extract_retry_after(body, headers, now=now)

        code = body.get("code")
        error_class = _ERROR_CLASSES[classification.kind]
        return error_class(
            error_message(status, body),
            kind=classification.kind,
            http_status=status,
            retryable=classification.retryable,
            correlation_id=correlation_id,
            retry_after_sec=retry_after_sec,
            code=code if isinstance(code, str) else None,
        )

    @staticmethod
    def translate_transport_error(
        error: BaseException,
        idempotent: bool,
        correlation_id: Optional[str] = None,
        timeout_ms: Optional[int] = None,
    ) -> BridgeError:
        """
        Единая граница: любая транспортная ошибка -> NETWORK_ERROR или TIMEOUT.

        Обе retryable только для идемпотентных запросов.
        """
        if isinstance(error, BridgeError):
            return error

        if isinstance(error, (httpx.TimeoutException, asyncio.TimeoutError)):
            return TimeoutError(
                "Request timed out",
                timeout_ms=timeout_ms,
                retryable=idempotent,
                correlation_id=correlation_id,
            )

        if isinstance(error, httpx.TransportError):
            message = str(error) or error.__class__.__name__
            return NetworkError(
                f"Network error: {message}",
                retryable=idempotent,
                correlation_id=correlation_id,
            )

        return NetworkError(
            f"Unexpected transport error: {error}",
            retryable=idempotent,
            correlation_id=correlation_id,
        )
