"""
Structured logger for Bridge Client.
"""

import logging
from typing import Optional, Any

from .config import LoggingConfig
from .handlers import create_handlers
from ...utils.sanitizer import mask_sensitive_data


class BridgeLogger:
    """
    Thin wrapper over ``logging.Logger`` taking fields as keyword arguments.

    Field values are passed through ``mask_sensitive_data`` so tokens,
    passwords and session ids never reach a handler.

    Without a config the wrapper leaves handler setup to the application
    and records propagate through the ``bridge_client`` hierarchy.

    Example:
        >>> logger = BridgeLogger(LoggingConfig.create(level="DEBUG"))
        >>> logger.info("Request completed", path="/status", latency_ms=42)
    """

    def __init__(self, config: Optional[LoggingConfig] = None, name: str = "bridge_client"):
        self.config = config
        self.name = name
        self._closed = False
        self._logger = logging.getLogger(name)

        if config is None:
            return

        self._logger.setLevel(config.level.numeric)
        self._logger.propagate = False
        self._logger.handlers.clear()
        for handler in create_handlers(config):
            self._logger.addHandler(handler)

    def _log(self, level: int, message: str, fields: dict, exc_info: bool = False) -> None:
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(level, message, extra=mask_sensitive_data(fields), exc_info=exc_info)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log with traceback; call from an exception handler."""
        self._log(logging.ERROR, message, kwargs, exc_info=True)

    def close(self) -> None:
        """
        Flush and close handlers installed by this wrapper.

        Idempotent. Does nothing for an unconfigured wrapper, since its
        handlers belong to the application.
        """
        if self._closed:
            return
        self._closed = True

        if self.config is None:
            return

        for handler in self._logger.handlers[:]:
            try:
                handler.flush()
                handler.close()
            except (OSError, ValueError):
                pass
            self._logger.removeHandler(handler)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
