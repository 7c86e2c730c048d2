"""
Shared, rate-limit-aware cache in front of ``GET /status``.

Many independent callers (widgets, hooks, background pollers) ask for the
bridge status. ``StatusPoller`` collapses them into at most one outstanding
request and reuses recent results:

1. A cached ``RateLimited`` result is returned verbatim until its
   ``retry_until`` passes, no matter how old it is.
2. A result younger than ``fresh_window_ms`` is returned as-is.
3. A request already in flight is shared with the new caller.
4. Otherwise a new request is issued and its classified result stored.

The check-and-set of the in-flight task has no ``await`` in between, so it
is atomic under the event loop without a lock.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, ClassVar, Optional, Union

from .core.config import StatusCacheConfig
from .core.context import Request
from .core.exceptions import BridgeError, ErrorKind, SessionLockedError
from .core.executor import RequestExecutor
from .models import ConnectionState, StatusResponse

logger = logging.getLogger(__name__)

MISSING_TOKEN_CODE = "missing_token"


@dataclass(frozen=True)
class StatusOk:
    state: ConnectionState
    connected_at: Optional[str] = None
    kind: ClassVar[str] = "ok"


@dataclass(frozen=True)
class LoginRequired:
    kind: ClassVar[str] = "login_required"


@dataclass(frozen=True)
class TokenInvalid:
    kind: ClassVar[str] = "token_invalid"


@dataclass(frozen=True)
class RateLimited:
    retry_after_sec: int
    retry_until: int  # epoch ms
    kind: ClassVar[str] = "rate_limited"


@dataclass(frozen=True)
class StatusError:
    http_status: Optional[int] = None
    message: Optional[str] = None
    kind: ClassVar[str] = "error"


BridgeUiStatus = Union[StatusOk, LoginRequired, TokenInvalid, RateLimited, StatusError]


@dataclass(frozen=True)
class CachedStatusResult:
    result: BridgeUiStatus
    fetched_at: int  # epoch ms

    @property
    def retry_until(self) -> Optional[int]:
        if isinstance(self.result, RateLimited):
            return self.result.retry_until
        return None


class StatusPoller:
    """
    Single-flight status cache.

    Example:
        >>> poller = StatusPoller(executor)
        >>> results = await asyncio.gather(*(poller.fetch_status() for _ in range(5)))
        >>> # one GET /status on the wire

    Args:
        executor: RequestExecutor used for the network call
        config: StatusCacheConfig
        clock: Returns epoch seconds; injectable for tests
    """

    def __init__(
        self,
        executor: RequestExecutor,
        config: Optional[StatusCacheConfig] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._executor = executor
        self._config = config or StatusCacheConfig()
        self._clock = clock
        self._cached: Optional[CachedStatusResult] = None
        self._in_flight: Optional["asyncio.Task[BridgeUiStatus]"] = None

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    @property
    def last_result(self) -> Optional[CachedStatusResult]:
        """Last stored result with its timestamp, or None."""
        return self._cached

    @property
    def in_flight(self) -> bool:
        return self._in_flight is not None

    def invalidate(self) -> None:
        """Forget the cached result. A request already in flight is kept."""
        self._cached = None

    async def fetch_status(self) -> BridgeUiStatus:
        """Return the bridge status, hitting the network only when needed."""
        now = self._now_ms()
        cached = self._cached

        if cached is not None:
            result = cached.result
            if isinstance(result, RateLimited):
                if now < result.retry_until:
                    return result
                # Cooldown over: a fresh request even inside the fresh window
            elif now - cached.fetched_at < self._config.fresh_window_ms:
                return result

        if self._in_flight is None:
            self._in_flight = asyncio.ensure_future(self._refresh())

        # shield: one cancelled caller must not cancel the shared fetch
        return await asyncio.shield(self._in_flight)

    async def _refresh(self) -> BridgeUiStatus:
        try:
            result = await self._fetch()
            self._cached = CachedStatusResult(result=result, fetched_at=self._now_ms())
            logger.debug("Status refreshed: %s", result.kind)
            return result
        finally:
            self._in_flight = None

    async def _fetch(self) -> BridgeUiStatus:
        try:
            data = await self._executor.execute(Request("GET", self._config.status_path))
            status = StatusResponse.from_dict(data)
        except SessionLockedError as e:
            return StatusError(http_status=e.status_code, message=e.message)
        except BridgeError as e:
            return self._classify_error(e)

        return StatusOk(state=status.state, connected_at=status.connected_at)

    def _classify_error(self, error: BridgeError) -> BridgeUiStatus:
        if error.kind is ErrorKind.UNAUTHORIZED:
            if error.code == MISSING_TOKEN_CODE:
                return LoginRequired()
            return TokenInvalid()

        if error.kind is ErrorKind.RATE_LIMITED:
            retry_after_sec = error.retry_after_sec
            if retry_after_sec is None:
                retry_after_sec = self._config.default_retry_after_sec
            return RateLimited(
                retry_after_sec=retry_after_sec,
                retry_until=self._now_ms() + retry_after_sec * 1000,
            )

        return StatusError(http_status=error.http_status, message=error.message)
