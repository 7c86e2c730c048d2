"""Core модули Bridge Client: конфиг, исполнитель запросов, retry, ошибки."""

from .config import (
    RetryPolicy,
    StatusCacheConfig,
    BridgeClientConfig,
)
from .context import Request, new_request_id
from .retry_engine import RetryEngine, compute_backoff_ms
from .error_handler import ErrorClassifier, extract_retry_after, parse_error_body
from .executor import RequestExecutor
from .exceptions import (
    BridgeClientException,
    ErrorKind,
    BridgeError,
    NetworkError,
    TimeoutError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    ClientError,
    ParseError,
    SessionLockedError,
    ConfigurationError,
)

__all__ = [
    # Config
    "RetryPolicy",
    "StatusCacheConfig",
    "BridgeClientConfig",
    # Request
    "Request",
    "new_request_id",
    # Retry
    "RetryEngine",
    "compute_backoff_ms",
    # Errors
    "ErrorClassifier",
    "extract_retry_after",
    "parse_error_body",
    # Executor
    "RequestExecutor",
    # Exceptions
    "BridgeClientException",
    "ErrorKind",
    "BridgeError",
    "NetworkError",
    "TimeoutError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "RateLimitedError",
    "ServerError",
    "ClientError",
    "ParseError",
    "SessionLockedError",
    "ConfigurationError",
]
