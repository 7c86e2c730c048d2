"""
Retry engine для повторных попыток.

Включает:
- Exponential backoff с jitter (10-30%)
- Решение о повторе с учётом идемпотентности
- Инжектируемый sleep для детерминированных тестов
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional

from .config import RetryPolicy
from .context import Request

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]

JITTER_MIN = 0.10
JITTER_MAX = 0.30


def compute_backoff_ms(
    attempt: int,
    policy: RetryPolicy,
    rand: Callable[[], float] = random.random,
) -> int:
    """
    Вычислить задержку перед повтором.

    ``delay = min(base * 2**attempt, max)``, плюс jitter 10-30% от delay,
    округление до миллисекунды.

    Args:
        attempt: Номер попытки (с 0)
        policy: RetryPolicy
        rand: Источник случайности в [0, 1)

    Returns:
        Задержка в миллисекундах

    Examples:
        >>> compute_backoff_ms(0, RetryPolicy(base_delay_ms=500), rand=lambda: 0.0)
        550
    """
    if attempt < 0:
        raise ValueError("attempt must be non-negative")

    # 2**attempt растёт быстро; ограничиваем до умножения
    if attempt >= 32:
        delay = float(policy.max_delay_ms)
    else:
        delay = float(min(policy.base_delay_ms * (2 ** attempt), policy.max_delay_ms))

    jitter = delay * (JITTER_MIN + (JITTER_MAX - JITTER_MIN) * rand())
    return int(round(delay + jitter))


class RetryEngine:
    """
    Механизм retry для одного логического запроса.

    Создаётся на каждый вызов ``execute``, поэтому счётчик попыток
    не разделяется между параллельными запросами.

    Examples:
        >>> engine = RetryEngine(RetryPolicy(max_retries=3))
        >>> if engine.should_retry(request, error):
        >>>     await engine.async_wait()
        >>>     engine.increment()
    """

    def __init__(
        self,
        policy: RetryPolicy,
        sleep: Optional[SleepFunc] = None,
        rand: Callable[[], float] = random.random,
    ):
        """
        Args:
            policy: Конфигурация retry
            sleep: Асинхронный sleep (секунды), по умолчанию asyncio.sleep
            rand: Источник случайности для jitter
        """
        self.policy = policy
        self._sleep = sleep or asyncio.sleep
        self._rand = rand
        self._attempt = 0

    def should_retry(self, request: Request, error: Exception) -> bool:
        """
        Решить нужен ли retry.

        Повтор допускается, только если ошибка retryable, запрос
        идемпотентен (или статус входит в ``retryable_status_codes``)
        и лимит повторов не исчерпан.

        Args:
            request: Логический запрос
            error: Классифицированная ошибка

        Returns:
            True если нужен retry
        """
        if self._attempt >= self.policy.max_retries:
            return False

        # RATE_LIMITED, PARSE_ERROR и session_locked сюда приходят с retryable=False
        if not getattr(error, 'retryable', False):
            return False

        if request.is_idempotent:
            return True

        status = getattr(error, 'http_status', None)
        if (
            self.policy.retry_non_idempotent
            and status is not None
            and status in self.policy.retryable_status_codes
        ):
            return True

        return False

    def get_wait_time_ms(self) -> int:
        """Задержка для текущей попытки (мс)."""
        return compute_backoff_ms(self._attempt, self.policy, self._rand)

    async def async_wait(self) -> int:
        """
        Подождать перед retry.

        Returns:
            Фактическая задержка (мс)
        """
        wait_ms = self.get_wait_time_ms()
        await self._sleep(wait_ms / 1000)
        return wait_ms

    def increment(self):
        """Увеличить счётчик попыток."""
        self._attempt += 1

    def reset(self):
        """Сбросить счётчик."""
        self._attempt = 0

    @property
    def attempt(self) -> int:
        """Текущая попытка (с 0)."""
        return self._attempt
