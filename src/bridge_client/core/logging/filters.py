"""
Log filters for correlation ids and static fields.

The correlation id lives in a ContextVar so that concurrent asyncio tasks
(an inbox fetch racing a send) each log their own X-Request-Id.
"""

import contextvars
import logging
from typing import Any, Mapping, Optional


_correlation_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "bridge_client_correlation_id", default=None
)


def set_correlation_id(correlation_id: Optional[str]) -> contextvars.Token:
    """
    Set correlation id for the current task.

    Returns:
        Token to pass to ``reset_correlation_id``
    """
    return _correlation_id.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    """Correlation id of the current task, or None."""
    return _correlation_id.get()


def reset_correlation_id(token: contextvars.Token) -> None:
    """Restore the correlation id that was active before ``set_correlation_id``."""
    _correlation_id.reset(token)


class CorrelationIdFilter(logging.Filter):
    """Adds ``correlation_id`` to records when one is active."""

    def filter(self, record: logging.LogRecord) -> bool:
        correlation_id = get_correlation_id()
        if correlation_id and not hasattr(record, 'correlation_id'):
            record.correlation_id = correlation_id
        return True


class ExtraFieldsFilter(logging.Filter):
    """
    Adds static fields (service, environment...) to all records.

    Example:
        >>> handler.addFilter(ExtraFieldsFilter({"service": "bridge-ui"}))
    """

    def __init__(self, extra_fields: Mapping[str, Any]):
        super().__init__()
        self.extra_fields = dict(extra_fields)

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.extra_fields.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
