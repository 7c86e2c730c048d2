# src/bridge_client/core/executor.py
"""
Исполнитель запросов к bridge на базе httpx.

Один вызов ``execute`` = один логический запрос: заголовки строятся
заново на каждой попытке (свежий токен), попытка ограничена таймаутом,
ошибки классифицируются и повторяются по правилам RetryEngine.
"""

import asyncio
import inspect
import json
import random
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Union
from urllib.parse import urlparse

import httpx

from .config import BridgeClientConfig
from .context import Request
from .error_handler import ErrorClassifier, parse_error_body
from .exceptions import BridgeError, ConfigurationError, ParseError, SessionLockedError
from .logging import BridgeLogger
from .logging.filters import set_correlation_id, reset_correlation_id
from .retry_engine import RetryEngine, SleepFunc
from .utils import build_headers, sanitize_headers

# Провайдер может быть sync или async: () -> Optional[str]
ValueProvider = Callable[[], Union[Optional[str], Awaitable[Optional[str]]]]

PREVIEW_LENGTH = 120
NO_CONTENT_STATUSES = frozenset({204, 205})


async def _resolve(provider: Optional[ValueProvider]) -> Optional[str]:
    """Вызвать провайдер и дождаться результата, если он awaitable."""
    if provider is None:
        return None
    value = provider()
    if inspect.isawaitable(value):
        value = await value
    return value


class RequestExecutor:
    """
    Цикл запрос/повтор для одного логического запроса.

    Example:
        >>> executor = RequestExecutor(config, token_provider=get_access_token)
        >>> data = await executor.execute(Request("GET", "/status"))
        >>> await executor.close()

    Args:
        config: BridgeClientConfig
        token_provider: Возвращает bearer токен; вызывается на КАЖДОЙ попытке
        user_id_provider: Возвращает значение X-User-Id
        sleep: Асинхронный sleep для backoff (по умолчанию asyncio.sleep)
        rand: Источник случайности для jitter
        clock: Часы для разбора Retry-After (epoch секунды)
        transport: Кастомный httpx transport (например, MockTransport)
    """

    def __init__(
        self,
        config: BridgeClientConfig,
        *,
        token_provider: Optional[ValueProvider] = None,
        user_id_provider: Optional[ValueProvider] = None,
        sleep: Optional[SleepFunc] = None,
        rand: Callable[[], float] = random.random,
        clock: Callable[[], float] = time.time,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not config.base_url:
            raise ConfigurationError("base_url is required")

        self._config = config
        self._token_provider = token_provider
        self._user_id_provider = user_id_provider
        self._sleep = sleep or asyncio.sleep
        self._rand = rand
        self._clock = clock
        self._transport = transport

        domain = urlparse(config.base_url).netloc or "unknown"
        self._logger = BridgeLogger(config.logging, name=f"bridge_client.{domain}")

        # Клиент создаётся лениво
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Получить или создать httpx клиент."""
        if self._client is None:
            client_kwargs: Dict[str, Any] = {
                "base_url": self._config.base_url,
                "timeout": httpx.Timeout(self._config.timeout_seconds),
                "verify": self._config.verify_ssl,
            }
            if self._transport is not None:
                client_kwargs["transport"] = self._transport
            self._client = httpx.AsyncClient(**client_kwargs)
        return self._client

    async def close(self) -> None:
        """Закрыть httpx клиент и логгер."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        self._logger.close()

    async def __aenter__(self) -> "RequestExecutor":
        await self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def config(self) -> BridgeClientConfig:
        return self._config

    # ==================== Выполнение ====================

    async def _headers_for_attempt(self, request: Request) -> Dict[str, str]:
        """Заголовки попытки; токен никогда не кешируется между попытками."""
        token = user_id = None
        if request.auth:
            token = await _resolve(self._token_provider)
            user_id = await _resolve(self._user_id_provider)

        return build_headers(
            request.request_id,
            token=token,
            user_id=user_id,
            api_key=self._config.api_key,
            static_headers=self._config.headers,
            extra_headers=request.headers,
        )

    async def _send(self, request: Request, headers: Dict[str, str]) -> httpx.Response:
        """Одна попытка под таймаутом."""
        client = await self._get_client()
        kwargs: Dict[str, Any] = {"headers": headers}
        if request.body is not None:
            kwargs["json"] = request.body

        return await asyncio.wait_for(
            client.request(request.method, request.path, **kwargs),
            timeout=self._config.timeout_seconds,
        )

    def _parse_success(self, request: Request, response: httpx.Response) -> Any:
        """
        Распарсить тело 2xx ответа.

        204/205 -> {}. Пустое тело при другом 2xx и битый JSON -> ParseError.
        """
        if response.status_code in NO_CONTENT_STATUSES:
            return {}
        text = response.text
        try:
            return json.loads(text)
        except ValueError:
            problem = "Invalid JSON" if text.strip() else "Empty body"
            raise ParseError(
                f"{problem} in response from {request.path}",
                byte_length=len(response.content),
                preview=text[:PREVIEW_LENGTH],
                http_status=response.status_code,
                correlation_id=request.request_id,
            ) from None

    async def execute(self, request: Request) -> Any:
        """
        Выполнить логический запрос с retry логикой.

        Args:
            request: Request

        Returns:
            Распарсенное JSON тело ответа

        Raises:
            BridgeError: Классифицированная ошибка (после исчерпания повторов
                возвращается последняя ошибка без изменений)
            SessionLockedError: 403 + code "session_locked", без повторов
        """
        retry_engine = RetryEngine(self._config.retry, sleep=self._sleep, rand=self._rand)
        correlation_token = set_correlation_id(request.request_id)
        started = time.monotonic()

        try:
            while True:
                attempt = retry_engine.attempt + 1
                headers = await self._headers_for_attempt(request)
                attempt_started = time.monotonic()

                self._logger.debug(
                    "Request attempt",
                    method=request.method,
                    path=request.path,
                    attempt=attempt,
                    headers=sanitize_headers(headers),
                    correlation_id=request.request_id,
                )

                try:
                    response = await self._send(request, headers)
                except (httpx.RequestError, asyncio.TimeoutError) as exc:
                    error = ErrorClassifier.translate_transport_error(
                        exc,
                        idempotent=request.is_idempotent,
                        correlation_id=request.request_id,
                        timeout_ms=self._config.timeout_ms,
                    )
                else:
                    latency_ms = round((time.monotonic() - attempt_started) * 1000)

                    if response.is_success:
                        try:
                            data = self._parse_success(request, response)
                        except ParseError as e:
                            self._logger.error(
                                "Request failed",
                                method=request.method,
                                path=request.path,
                                status_code=response.status_code,
                                outcome=e.kind.value,
                                attempt=attempt,
                                latency_ms=latency_ms,
                                byte_length=e.byte_length,
                                correlation_id=request.request_id,
                            )
                            raise

                        self._logger.info(
                            "Request completed",
                            method=request.method,
                            path=request.path,
                            status_code=response.status_code,
                            outcome="ok",
                            attempt=attempt,
                            latency_ms=latency_ms,
                            correlation_id=request.request_id,
                        )
                        return data

                    body = parse_error_body(response.text)
                    try:
                        error = ErrorClassifier.build_error(
                            response.status_code,
                            body,
                            headers=response.headers,
                            correlation_id=request.request_id,
                            now=self._clock(),
                        )
                    except SessionLockedError:
                        self._logger.warning(
                            "Session locked",
                            method=request.method,
                            path=request.path,
                            status_code=response.status_code,
                            outcome="session_locked",
                            attempt=attempt,
                            latency_ms=latency_ms,
                            correlation_id=request.request_id,
                        )
                        raise

                if not retry_engine.should_retry(request, error):
                    self._log_failure(request, error, attempt, started)
                    raise error

                wait_ms = await retry_engine.async_wait()
                self._logger.warning(
                    "Request error (will retry)",
                    method=request.method,
                    path=request.path,
                    status_code=error.http_status,
                    outcome=error.kind.value,
                    attempt=attempt,
                    max_attempts=self._config.retry.max_attempts,
                    wait_ms=wait_ms,
                    correlation_id=request.request_id,
                )
                retry_engine.increment()
        finally:
            reset_correlation_id(correlation_token)

    def _log_failure(
        self,
        request: Request,
        error: BridgeError,
        attempt: int,
        started: float,
    ) -> None:
        self._logger.error(
            "Request failed",
            method=request.method,
            path=request.path,
            status_code=error.http_status,
            outcome=error.kind.value,
            error=error.message,
            attempt=attempt,
            duration_ms=round((time.monotonic() - started) * 1000),
            retry_after_sec=error.retry_after_sec,
            correlation_id=request.request_id,
        )
