"""Bridge Client - resilient async client for the bridge gateway."""

import logging
from importlib.metadata import version, PackageNotFoundError

from .client import BridgeClient
from .session import Session, SessionIssuer, SessionPurpose
from .status_poller import (
    StatusPoller,
    BridgeUiStatus,
    CachedStatusResult,
    StatusOk,
    LoginRequired,
    TokenInvalid,
    RateLimited,
    StatusError,
)
from .models import (
    ConnectionState,
    MessageState,
    HealthResponse,
    StatusResponse,
    ConnectAck,
    DisconnectResponse,
    UnlockStatusResponse,
    UnlockResponse,
    LockResponse,
    Conversation,
    MessageItem,
    MessageList,
    SendResult,
    AckResult,
)
from .core.config import (
    BridgeClientConfig,
    RetryPolicy,
    StatusCacheConfig,
)
from .core.context import Request
from .core.executor import RequestExecutor
from .core.env_config import load_from_env
from .core.logging import LoggingConfig
from .core.exceptions import (
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

# NullHandler prevents "No handler found" warnings
# Users can configure logging themselves using logging.getLogger('bridge_client')
logging.getLogger('bridge_client').addHandler(logging.NullHandler())

# Version info - read from package metadata (single source of truth in pyproject.toml)
try:
    __version__ = version("bridge-client-core")
except PackageNotFoundError:
    # Package is not installed (development mode)
    __version__ = "0.0.0-dev"

__all__ = [
    # Client
    "BridgeClient",
    "RequestExecutor",
    "Request",
    "SessionIssuer",
    "Session",
    "SessionPurpose",

    # Status
    "StatusPoller",
    "BridgeUiStatus",
    "CachedStatusResult",
    "StatusOk",
    "LoginRequired",
    "TokenInvalid",
    "RateLimited",
    "StatusError",

    # Models
    "ConnectionState",
    "MessageState",
    "HealthResponse",
    "StatusResponse",
    "ConnectAck",
    "DisconnectResponse",
    "UnlockStatusResponse",
    "UnlockResponse",
    "LockResponse",
    "Conversation",
    "MessageItem",
    "MessageList",
    "SendResult",
    "AckResult",

    # Config
    "BridgeClientConfig",
    "RetryPolicy",
    "StatusCacheConfig",
    "LoggingConfig",
    "load_from_env",

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

    # Version
    "__version__",
]
