"""Typed payloads returned by the bridge endpoints.

Models for loosely specified payloads keep the decoded JSON object in
``raw`` so fields the bridge adds later stay reachable.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .core.exceptions import ParseError


def expect_object(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ParseError(
            f"Expected JSON object for {what}, got {type(data).__name__}",
            preview=repr(data)[:120],
        )
    return data


def require_str(data: Dict[str, Any], key: str, what: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise ParseError(f"Missing '{key}' in {what} response", preview=repr(data)[:120])
    return value


def optional_int(data: Dict[str, Any], key: str, what: str) -> int:
    """Integer field; missing or null reads as 0."""
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    # JSON numbers like 1700000000.0 (NaN and Infinity are not integers)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ParseError(
        f"Expected integer '{key}' in {what}, got {value!r}",
        preview=repr(data)[:120],
    )


class ConnectionState(str, Enum):
    """Bridge connection state as reported by /status."""
    IDLE = "idle"
    CONNECTING = "connecting"
    SECURE = "secure"


class MessageState(str, Enum):
    """Delivery bookkeeping state; "consumed" is not a read receipt."""
    AVAILABLE = "available"
    CONSUMED = "consumed"


@dataclass(frozen=True)
class HealthResponse:
    ok: bool
    service: Optional[str] = None
    version: Optional[str] = None
    time: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Any) -> "HealthResponse":
        data = expect_object(data, "health")
        return cls(
            ok=bool(data.get("ok", False)),
            service=data.get("service"),
            version=data.get("version"),
            time=data.get("time"),
            raw=data,
        )


@dataclass(frozen=True)
class StatusResponse:
    state: ConnectionState
    connected_at: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Any) -> "StatusResponse":
        data = expect_object(data, "status")
        try:
            state = ConnectionState(data.get("state"))
        except ValueError:
            raise ParseError(
                f"Unknown connection state {data.get('state')!r}",
                preview=repr(data)[:120],
            ) from None
        return cls(state=state, connected_at=data.get("connectedAt"), raw=data)


@dataclass(frozen=True)
class ConnectAck:
    """Acknowledgement of a connect_intent; completion is observed via /status."""
    request_id: Optional[str] = None
    ack: Optional[bool] = None
    status: Optional[str] = None
    server_time: Optional[str] = None
    error_code: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Any) -> "ConnectAck":
        data = expect_object(data, "connect")
        return cls(
            request_id=data.get("requestId"),
            ack=data.get("ack"),
            status=data.get("status"),
            server_time=data.get("serverTime"),
            error_code=data.get("errorCode"),
            raw=data,
        )


@dataclass(frozen=True)
class DisconnectResponse:
    state: Optional[str] = None
    message: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Any) -> "DisconnectResponse":
        data = expect_object(data, "disconnect")
        return cls(state=data.get("state"), message=data.get("message"), raw=data)


@dataclass(frozen=True)
class UnlockStatusResponse:
    locked: bool
    expires_at: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Any) -> "UnlockStatusResponse":
        data = expect_object(data, "unlock status")
        return cls(locked=bool(data.get("locked", True)), expires_at=data.get("expiresAt"), raw=data)


@dataclass(frozen=True)
class UnlockResponse:
    success: bool
    expires_at: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Any) -> "UnlockResponse":
        data = expect_object(data, "unlock")
        return cls(success=bool(data.get("success", False)), expires_at=data.get("expiresAt"), raw=data)


@dataclass(frozen=True)
class LockResponse:
    state: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Any) -> "LockResponse":
        data = expect_object(data, "lock")
        return cls(state=data.get("state"), raw=data)


@dataclass(frozen=True)
class Conversation:
    conversation_id: str
    server_time: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "Conversation":
        data = expect_object(data, "conversation/create")
        return cls(
            conversation_id=require_str(data, "conversationId", "conversation/create"),
            server_time=data.get("serverTime"),
        )


@dataclass(frozen=True)
class MessageItem:
    """One envelope. ``payload_ciphertext_b64`` is opaque to this client."""
    conversation_id: str
    payload_ciphertext_b64: str
    envelope_fingerprint: str
    created_at_unix: int
    expires_at_unix: int
    state: MessageState

    @classmethod
    def from_dict(cls, data: Any) -> "MessageItem":
        data = expect_object(data, "message item")
        try:
            state = MessageState(data.get("state", MessageState.AVAILABLE.value))
        except ValueError:
            raise ParseError(
                f"Unknown message state {data.get('state')!r}",
                preview=repr(data)[:120],
            ) from None
        return cls(
            conversation_id=data.get("conversationId", ""),
            payload_ciphertext_b64=data.get("payloadCiphertextB64", ""),
            envelope_fingerprint=data.get("envelopeFingerprint", ""),
            created_at_unix=optional_int(data, "createdAtUnix", "message item"),
            expires_at_unix=optional_int(data, "expiresAtUnix", "message item"),
            state=state,
        )


@dataclass(frozen=True)
class MessageList:
    """Inbox or thread page, newest-first exactly as the bridge sent it."""
    items: List[MessageItem]
    server_time: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "MessageList":
        data = expect_object(data, "message list")
        # The bridge sends null for an empty queue
        items = data.get("items") or []
        if not isinstance(items, list):
            raise ParseError("'items' must be a list", preview=repr(items)[:120])
        return cls(
            items=[MessageItem.from_dict(item) for item in items],
            server_time=data.get("serverTime"),
        )


@dataclass(frozen=True)
class SendResult:
    status: Optional[str] = None
    server_time: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Any) -> "SendResult":
        data = expect_object(data, "message/send")
        return cls(status=data.get("status"), server_time=data.get("serverTime"), raw=data)


@dataclass(frozen=True)
class AckResult:
    acked: int
    server_time: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "AckResult":
        data = expect_object(data, "message/ack")
        return cls(acked=optional_int(data, "acked", "message/ack"), server_time=data.get("serverTime"))
