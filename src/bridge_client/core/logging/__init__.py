"""
Logging system for Bridge Client.

Example:
    >>> from bridge_client.core.logging import LoggingConfig
    >>> config = LoggingConfig.create(level="DEBUG", format="json")
    >>> client = BridgeClient(config=BridgeClientConfig(base_url=url, logging=config))
"""

from .config import LoggingConfig, LogLevel, LogFormat
from .logger import BridgeLogger
from .formatters import JSONFormatter, TextFormatter, get_formatter
from .filters import (
    CorrelationIdFilter,
    ExtraFieldsFilter,
    set_correlation_id,
    get_correlation_id,
    reset_correlation_id,
)
from .handlers import create_handlers

__all__ = [
    "LoggingConfig",
    "LogLevel",
    "LogFormat",
    "BridgeLogger",
    "JSONFormatter",
    "TextFormatter",
    "get_formatter",
    "CorrelationIdFilter",
    "ExtraFieldsFilter",
    "set_correlation_id",
    "get_correlation_id",
    "reset_correlation_id",
    "create_handlers",
]
