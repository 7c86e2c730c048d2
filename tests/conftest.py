"""
Pytest configuration and fixtures for bridge-client-core tests.
"""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from bridge_client.core.config import BridgeClientConfig
from bridge_client.core.executor import RequestExecutor
from bridge_client.core.logging.config import LoggingConfig

BASE_URL = "https://bridge.test"


class FakeClock:
    """Controllable epoch-seconds clock."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def base_url():
    """Base URL for testing."""
    return BASE_URL


@pytest.fixture
def config(base_url):
    """Client config with default retry policy and a static apikey."""
    return BridgeClientConfig.create(base_url=base_url, api_key="anon-key")


@pytest.fixture
def no_sleep():
    """Backoff sleep that returns immediately and records delays."""
    return AsyncMock(return_value=None)


@pytest.fixture
def token_provider():
    """Async token provider returning a fixed token."""
    return AsyncMock(return_value="token-1")


@pytest.fixture
def clock():
    return FakeClock()


@pytest_asyncio.fixture
async def executor(config, no_sleep, token_provider, clock):
    """RequestExecutor with zero jitter and instant backoff."""
    executor = RequestExecutor(
        config,
        token_provider=token_provider,
        user_id_provider=lambda: "user-42",
        sleep=no_sleep,
        rand=lambda: 0.0,
        clock=clock,
    )
    yield executor
    await executor.close()


@pytest.fixture
def logging_config_with_file(tmp_path):
    """
    LoggingConfig fixture with JSON file logging enabled.

    Uses temporary directory for log files to avoid cleanup issues.
    """
    log_file = tmp_path / "bridge.log"
    return LoggingConfig.create(
        level="DEBUG",
        format="json",
        enable_console=False,
        enable_file=True,
        file_path=str(log_file)
    )
