"""
Handler construction from a LoggingConfig.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List

from .config import LoggingConfig
from .filters import CorrelationIdFilter, ExtraFieldsFilter
from .formatters import get_formatter


def _rotating_file(config: LoggingConfig) -> RotatingFileHandler:
    # bridge.log, bridge.log.1 ... bridge.log.<backup_count>
    path = Path(config.file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        filename=str(path),
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
        encoding='utf-8',
    )


def create_handlers(config: LoggingConfig) -> List[logging.Handler]:
    """
    Build the console and/or file handlers a config asks for.

    Every handler shares one formatter and the correlation id / static
    field filters, so file and console lines carry the same fields.
    """
    handlers: List[logging.Handler] = []
    if config.enable_console:
        handlers.append(logging.StreamHandler(sys.stderr))
    if config.enable_file:
        handlers.append(_rotating_file(config))

    formatter = get_formatter(config.format)
    filters: List[logging.Filter] = []
    if config.enable_correlation_id:
        filters.append(CorrelationIdFilter())
    if config.extra_fields:
        filters.append(ExtraFieldsFilter(config.extra_fields))

    for handler in handlers:
        handler.setLevel(config.level.numeric)
        handler.setFormatter(formatter)
        for log_filter in filters:
            handler.addFilter(log_filter)
    return handlers
