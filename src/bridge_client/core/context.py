"""Request description shared by every attempt of one logical call."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional
import uuid

IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


def new_request_id() -> str:
    """Generate a correlation id for one logical request."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Request:
    """Immutable logical request.

    All retry attempts reuse the same ``request_id`` so server and client
    logs can be correlated across the whole retry chain.

    Attributes:
        method: HTTP method (GET, POST, etc.)
        path: Path relative to the bridge base URL
        body: JSON-serialisable body or None
        headers: Extra headers merged last
        auth: Attach bearer token / user id headers
        request_id: Correlation id sent as X-Request-Id

    Example:
        >>> req = Request('POST', '/session/issue', body={'purpose': 'message_send'})
        >>> req.is_idempotent
        False
    """

    method: str
    path: str
    body: Optional[Any] = None
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    auth: bool = True
    request_id: str = field(default_factory=new_request_id)

    def __post_init__(self):
        object.__setattr__(self, 'method', self.method.upper())
        if not self.path.startswith('/'):
            object.__setattr__(self, 'path', '/' + self.path)
        if isinstance(self.headers, dict):
            object.__setattr__(self, 'headers', MappingProxyType(dict(self.headers)))

    @property
    def is_idempotent(self) -> bool:
        """True for GET/HEAD/OPTIONS."""
        return self.method in IDEMPOTENT_METHODS
