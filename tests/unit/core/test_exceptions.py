"""Тесты иерархии исключений."""

from bridge_client.core.exceptions import (
    BridgeClientException,
    BridgeError,
    ConfigurationError,
    ErrorKind,
    NetworkError,
    ParseError,
    RateLimitedError,
    ServerError,
    SessionLockedError,
    TimeoutError,
)


def test_server_error_retryable_by_default():
    error = ServerError("HTTP 500", http_status=500)
    assert error.kind is ErrorKind.SERVER_ERROR
    assert error.retryable is True
    assert error.fatal is False


def test_retryable_override():
    error = ServerError("HTTP 500", http_status=500, retryable=False)
    assert error.retryable is False
    assert error.fatal is True


def test_timeout_is_network_error():
    error = TimeoutError("Request timed out", timeout_ms=1500)
    assert isinstance(error, NetworkError)
    assert error.kind is ErrorKind.TIMEOUT
    assert str(error) == "Request timed out (timeout: 1500ms)"


def test_parse_error_never_retryable():
    error = ParseError("Invalid JSON", byte_length=12, preview="<html>")
    assert error.retryable is False
    assert error.byte_length == 12
    assert error.preview == "<html>"


def test_to_dict():
    error = RateLimitedError(
        "Too many requests",
        http_status=429,
        retryable=False,
        correlation_id="req-1",
        retry_after_sec=30,
    )
    assert error.to_dict() == {
        "kind": "RATE_LIMITED",
        "message": "Too many requests",
        "httpStatus": 429,
        "retryable": False,
        "correlationId": "req-1",
        "retryAfterSec": 30,
        "code": None,
    }


def test_repr_contains_kind():
    error = ServerError("HTTP 503", http_status=503, correlation_id="abc")
    assert "SERVER_ERROR" in repr(error)
    assert "abc" in repr(error)


def test_session_locked_is_separate():
    """SessionLockedError вне иерархии BridgeError."""
    error = SessionLockedError()
    assert isinstance(error, BridgeClientException)
    assert not isinstance(error, BridgeError)
    assert error.code == "session_locked"
    assert error.status_code == 403
    assert error.message == "Identity session is locked"


def test_configuration_error_fatal():
    assert ConfigurationError("bad").fatal is True
