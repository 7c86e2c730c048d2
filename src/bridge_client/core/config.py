"""
Система конфигурации для Bridge Client.

Все конфиги immutable (frozen dataclasses).
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Dict, FrozenSet, Union, TYPE_CHECKING, Mapping
from types import MappingProxyType

if TYPE_CHECKING:
    from .logging import LoggingConfig

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# RETRY POLICY
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class RetryPolicy:
    """
    Конфигурация retry стратегии.

    Args:
        max_retries: Максимум повторов (НЕ включая первую попытку)
        base_delay_ms: Базовая задержка (мс)
        max_delay_ms: Максимальная задержка до jitter (мс)
        retryable_status_codes: Статусы, при которых допускается повтор
            неидемпотентного запроса (если ошибка retryable)
        retry_non_idempotent: Разрешить повтор неидемпотентных запросов
            по ``retryable_status_codes``

    Examples:
        >>> RetryPolicy(max_retries=3, base_delay_ms=500)
        >>> RetryPolicy(max_retries=0)  # Без повторов
    """
    max_retries: int = 3
    base_delay_ms: int = 500
    max_delay_ms: int = 5000

    retryable_status_codes: FrozenSet[int] = field(
        default_factory=lambda: frozenset({408, 429, 500, 502, 503, 504})
    )
    retry_non_idempotent: bool = True

    def __post_init__(self):
        """Валидация."""
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.base_delay_ms < 0:
            raise ValueError("base_delay_ms must be non-negative")
        if self.max_delay_ms < 0:
            raise ValueError("max_delay_ms must be non-negative")
        if self.max_delay_ms < self.base_delay_ms:
            raise ValueError("max_delay_ms must be >= base_delay_ms")
        if isinstance(self.retryable_status_codes, (set, list, tuple)):
            object.__setattr__(
                self, 'retryable_status_codes', frozenset(self.retryable_status_codes)
            )

    @property
    def max_attempts(self) -> int:
        """Общее количество попыток (включая первую)."""
        return self.max_retries + 1

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# STATUS CACHE CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class StatusCacheConfig:
    """
    Конфигурация кеша /status.

    Args:
        fresh_window_ms: Сколько результат считается свежим (мс)
        default_retry_after_sec: Cooldown после 429, если сервер не указал
        status_path: Путь endpoint'а статуса
    """
    fresh_window_ms: int = 2500
    default_retry_after_sec: int = 60
    status_path: str = "/status"

    def __post_init__(self):
        """Валидация."""
        if self.fresh_window_ms < 0:
            raise ValueError("fresh_window_ms must be non-negative")
        if self.default_retry_after_sec <= 0:
            raise ValueError("default_retry_after_sec must be positive")
        if not self.status_path.startswith("/"):
            raise ValueError("status_path must start with '/'")

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# MAIN CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class BridgeClientConfig:
    """
    Главная конфигурация BridgeClient.

    Args:
        base_url: Базовый URL bridge
        api_key: Статический ключ клиента (заголовок ``apikey``)
        timeout_ms: Таймаут одной попытки (мс)
        retry: Конфигурация retry
        status_cache: Конфигурация кеша /status
        headers: Дополнительные статические заголовки
        verify_ssl: Проверять SSL сертификаты
        logging: Конфигурация логирования (None = логгер пакета без handlers)

    Examples:
        >>> config = BridgeClientConfig(base_url="https://bridge.example.com")
        >>> config = BridgeClientConfig.create(
        ...     base_url="https://bridge.example.com",
        ...     api_key="anon-key",
        ...     max_retries=5,
        ... )
    """
    base_url: str = ""
    api_key: Optional[str] = None
    timeout_ms: int = 30_000
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    status_cache: StatusCacheConfig = field(default_factory=StatusCacheConfig)
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    verify_ssl: bool = True
    logging: Optional['LoggingConfig'] = None

    def __post_init__(self):
        """Валидация, нормализация base_url и заморозка headers."""
        if self.timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")

        if isinstance(self.headers, dict):
            object.__setattr__(self, 'headers', MappingProxyType(dict(self.headers)))

        if self.base_url:
            normalized = self.base_url.rstrip('/')
            if normalized != self.base_url:
                object.__setattr__(self, 'base_url', normalized)

    @property
    def timeout_seconds(self) -> float:
        """Таймаут в секундах (для asyncio/httpx)."""
        return self.timeout_ms / 1000

    @classmethod
    def create(
        cls,
        base_url: str = "",
        api_key: Optional[str] = None,
        timeout_ms: int = 30_000,
        max_retries: int = 3,
        base_delay_ms: int = 500,
        max_delay_ms: int = 5000,
        fresh_window_ms: int = 2500,
        headers: Optional[Dict[str, str]] = None,
        verify_ssl: bool = True,
        logging: Optional['LoggingConfig'] = None,
    ) -> 'BridgeClientConfig':
        """
        Удобный конструктор конфигурации из плоских параметров.

        Examples:
            >>> config = BridgeClientConfig.create(timeout_ms=10_000, max_retries=1)
        """
        return cls(
            base_url=base_url,
            api_key=api_key,
            timeout_ms=timeout_ms,
            retry=RetryPolicy(
                max_retries=max_retries,
                base_delay_ms=base_delay_ms,
                max_delay_ms=max_delay_ms,
            ),
            status_cache=StatusCacheConfig(fresh_window_ms=fresh_window_ms),
            headers=headers or {},
            verify_ssl=verify_ssl,
            logging=logging,
        )

    def with_timeout(self, timeout_ms: int) -> 'BridgeClientConfig':
        """Новый конфиг с изменённым таймаутом."""
        return replace(self, timeout_ms=timeout_ms)

    def with_retry(self, retry: Union[int, RetryPolicy]) -> 'BridgeClientConfig':
        """
        Новый конфиг с изменённым retry.

        Args:
            retry: RetryPolicy или количество повторов
        """
        if not isinstance(retry, RetryPolicy):
            retry = replace(self.retry, max_retries=retry)
        return replace(self, retry=retry)

    def with_headers(self, headers: Dict[str, str]) -> 'BridgeClientConfig':
        """Новый конфиг с дополнительными заголовками."""
        merged = dict(self.headers)
        merged.update(headers)
        return replace(self, headers=merged)
