"""
Tests for BridgeClient facade and messaging session scoping.
"""

import json
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio
import respx

from bridge_client import BridgeClient
from bridge_client.core.config import BridgeClientConfig
from bridge_client.core.exceptions import NotFoundError, ParseError, SessionLockedError
from bridge_client.models import ConnectionState, MessageState
from bridge_client.status_poller import StatusOk

BASE_URL = "https://bridge.test"


def body_of(call):
    return json.loads(call.request.content)


@pytest_asyncio.fixture
async def client(config, no_sleep, token_provider, clock):
    client = BridgeClient(
        config=config,
        token_provider=token_provider,
        user_id_provider=AsyncMock(return_value="user-42"),
        sleep=no_sleep,
        clock=clock,
        rand=lambda: 0.0,
    )
    yield client
    await client.close()


class TestGateway:

    @pytest.mark.asyncio
    async def test_health_first_try(self, client, no_sleep, token_provider):
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.get("/health").mock(return_value=httpx.Response(200, json={
                "ok": True, "service": "bridge", "version": "1.4.0", "time": "2026-01-01T00:00:00Z",
            }))

            health = await client.health()

        assert health.ok is True
        assert health.service == "bridge"
        assert health.version == "1.4.0"
        assert route.call_count == 1
        no_sleep.assert_not_awaited()
        token_provider.assert_not_awaited()
        assert "Authorization" not in route.calls.last.request.headers

    @pytest.mark.asyncio
    async def test_status_bypasses_cache(self, client):
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.get("/status").mock(return_value=httpx.Response(200, json={"state": "secure"}))

            await client.status()
            status = await client.status()

        assert route.call_count == 2
        assert status.state is ConnectionState.SECURE

    @pytest.mark.asyncio
    async def test_fetch_status_uses_poller(self, client):
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.get("/status").mock(return_value=httpx.Response(200, json={"state": "idle"}))

            first = await client.fetch_status()
            second = await client.fetch_status()

        assert route.call_count == 1
        assert first is second
        assert first == StatusOk(state=ConnectionState.IDLE)

    @pytest.mark.asyncio
    async def test_connect_sends_intent(self, client):
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post("/connect").mock(return_value=httpx.Response(
                200, json={"ack": True, "status": "connecting"}
            ))

            ack = await client.connect("https://target.example")

        sent = route.calls.last.request
        body = json.loads(sent.content)
        assert body["v"] == 1
        assert body["type"] == "connect_intent"
        assert body["targetUrl"] == "https://target.example"
        assert body["requestId"] == sent.headers["X-Request-Id"]
        assert ack.ack is True
        assert ack.status == "connecting"

    @pytest.mark.asyncio
    async def test_connect_requires_target(self, client):
        with pytest.raises(ValueError):
            await client.connect("")

    @pytest.mark.asyncio
    async def test_disconnect(self, client):
        with respx.mock(base_url=BASE_URL) as mock:
            mock.post("/disconnect").mock(return_value=httpx.Response(
                200, json={"state": "idle", "message": "disconnected"}
            ))
            result = await client.disconnect()

        assert result.state == "idle"
        assert result.message == "disconnected"


class TestIdentityLock:

    @pytest.mark.asyncio
    async def test_unlock_status(self, client):
        with respx.mock(base_url=BASE_URL) as mock:
            mock.get("/unlock/status").mock(return_value=httpx.Response(200, json={"locked": False, "expiresAt": "x"}))
            result = await client.unlock_status()

        assert result.locked is False
        assert result.expires_at == "x"

    @pytest.mark.asyncio
    async def test_unlock_sends_password(self, client):
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post("/unlock").mock(return_value=httpx.Response(
                200, json={"success": True, "expiresAt": "2026-01-01T01:00:00Z"}
            ))
            result = await client.unlock("correct horse")

        assert body_of(route.calls.last) == {"password": "correct horse"}
        assert result.success is True

    @pytest.mark.asyncio
    async def test_lock_empty_response(self, client):
        with respx.mock(base_url=BASE_URL) as mock:
            mock.post("/lock").mock(return_value=httpx.Response(204))
            result = await client.lock()

        assert result.state is None


class TestMessaging:
    """Every messaging call issues a fresh, correctly scoped session first."""

    @pytest.mark.asyncio
    async def test_send_message(self, client):
        with respx.mock(base_url=BASE_URL) as mock:
            issue = mock.post("/session/issue").mock(return_value=httpx.Response(
                200, json={"sessionId": "s-1", "serverTime": "t"}
            ))
            send = mock.post("/message/send").mock(return_value=httpx.Response(
                200, json={"status": "queued"}
            ))

            result = await client.send_message("c1", "aGVsbG8=")

        assert issue.call_count == 1
        assert body_of(issue.calls.last) == {"purpose": "message_send", "conversationId": "c1"}
        assert send.call_count == 1
        assert body_of(send.calls.last) == {
            "sessionId": "s-1",
            "conversationId": "c1",
            "plaintextB64": "aGVsbG8=",
        }
        assert result.status == "queued"

    @pytest.mark.asyncio
    async def test_send_requires_conversation(self, client):
        with pytest.raises(ValueError):
            await client.send_message("", "aGVsbG8=")

    @pytest.mark.asyncio
    async def test_fetch_inbox(self, client):
        items = [
            {
                "conversationId": "c2",
                "payloadCiphertextB64": "b2xk",
                "envelopeFingerprint": "fp-2",
                "createdAtUnix": 200,
                "expiresAtUnix": 900,
                "state": "available",
            },
            {
                "conversationId": "c1",
                "payloadCiphertextB64": "bmV3",
                "envelopeFingerprint": "fp-1",
                "createdAtUnix": 100,
                "expiresAtUnix": 800,
                "state": "available",
            },
        ]
        with respx.mock(base_url=BASE_URL) as mock:
            issue = mock.post("/session/issue").mock(return_value=httpx.Response(200, json={"sessionId": "s-in"}))
            inbox = mock.post("/message/inbox").mock(return_value=httpx.Response(
                200, json={"items": items, "serverTime": "t"}
            ))

            result = await client.fetch_inbox(limit=20)

        assert body_of(issue.calls.last) == {"purpose": "message_receive", "conversationId": None}
        assert body_of(inbox.calls.last) == {"sessionId": "s-in", "limit": 20}
        assert [item.envelope_fingerprint for item in result.items] == ["fp-2", "fp-1"]
        assert result.items[0].state is MessageState.AVAILABLE

    @pytest.mark.asyncio
    async def test_fetch_inbox_without_limit(self, client):
        with respx.mock(base_url=BASE_URL) as mock:
            mock.post("/session/issue").mock(return_value=httpx.Response(200, json={"sessionId": "s-in"}))
            inbox = mock.post("/message/inbox").mock(return_value=httpx.Response(200, json={"items": None}))

            result = await client.fetch_inbox()

        assert body_of(inbox.calls.last) == {"sessionId": "s-in"}
        assert result.items == []

    @pytest.mark.asyncio
    async def test_fetch_inbox_empty_body_is_parse_error(self, client):
        with respx.mock(base_url=BASE_URL) as mock:
            mock.post("/session/issue").mock(return_value=httpx.Response(200, json={"sessionId": "s-in"}))
            mock.post("/message/inbox").mock(return_value=httpx.Response(200, content=b""))

            with pytest.raises(ParseError):
                await client.fetch_inbox(limit=20)

    @pytest.mark.asyncio
    async def test_fetch_thread(self, client):
        with respx.mock(base_url=BASE_URL) as mock:
            issue = mock.post("/session/issue").mock(return_value=httpx.Response(200, json={"sessionId": "s-th"}))
            thread = mock.post("/message/thread").mock(return_value=httpx.Response(200, json={"items": [
                {"conversationId": "c1", "payloadCiphertextB64": "eA==", "envelopeFingerprint": "fp",
                 "createdAtUnix": 1, "expiresAtUnix": 2, "state": "consumed"},
            ]}))

            result = await client.fetch_thread("c1", limit=50, include_consumed=True)

        assert body_of(issue.calls.last) == {"purpose": "message_receive", "conversationId": "c1"}
        assert body_of(thread.calls.last) == {
            "sessionId": "s-th",
            "conversationId": "c1",
            "limit": 50,
            "includeConsumed": True,
        }
        assert result.items[0].state is MessageState.CONSUMED

    @pytest.mark.asyncio
    async def test_ack_messages(self, client):
        with respx.mock(base_url=BASE_URL) as mock:
            issue = mock.post("/session/issue").mock(return_value=httpx.Response(200, json={"sessionId": "s-ack"}))
            ack = mock.post("/message/ack").mock(return_value=httpx.Response(200, json={"acked": 2}))

            result = await client.ack_messages("c1", ["fp-1", "fp-2"])

        assert body_of(issue.calls.last) == {"purpose": "message_receive", "conversationId": "c1"}
        assert body_of(ack.calls.last) == {
            "sessionId": "s-ack",
            "conversationId": "c1",
            "envelopeFingerprints": ["fp-1", "fp-2"],
        }
        assert result.acked == 2

    @pytest.mark.asyncio
    async def test_sessions_never_reused(self, client):
        with respx.mock(base_url=BASE_URL) as mock:
            issue = mock.post("/session/issue").mock(side_effect=[
                httpx.Response(200, json={"sessionId": "s-1"}),
                httpx.Response(200, json={"sessionId": "s-2"}),
            ])
            send = mock.post("/message/send").mock(return_value=httpx.Response(200, json={}))

            await client.send_message("c1", "YQ==")
            await client.send_message("c1", "Yg==")

        assert issue.call_count == 2
        assert [body_of(call)["sessionId"] for call in send.calls] == ["s-1", "s-2"]

    @pytest.mark.asyncio
    async def test_session_locked_stops_operation(self, client):
        with respx.mock(base_url=BASE_URL, assert_all_called=False) as mock:
            mock.post("/session/issue").mock(return_value=httpx.Response(
                403, json={"code": "session_locked"}
            ))
            send = mock.post("/message/send").mock(return_value=httpx.Response(200, json={}))

            with pytest.raises(SessionLockedError):
                await client.send_message("c1", "YQ==")

        assert send.call_count == 0

    @pytest.mark.asyncio
    async def test_operation_error_propagates(self, client):
        with respx.mock(base_url=BASE_URL) as mock:
            mock.post("/session/issue").mock(return_value=httpx.Response(200, json={"sessionId": "s-1"}))
            mock.post("/message/thread").mock(return_value=httpx.Response(404, json={"error": "not_found"}))

            with pytest.raises(NotFoundError):
                await client.fetch_thread("missing")

    @pytest.mark.asyncio
    async def test_create_conversation(self, client):
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post("/conversation/create").mock(return_value=httpx.Response(
                200, json={"conversationId": "c-new", "serverTime": "t"}
            ))

            conversation = await client.create_conversation("peer-fp", peer_ref_encrypted_b64="cmVm")

        assert body_of(route.calls.last) == {"peerFingerprint": "peer-fp", "peerRefEncryptedB64": "cmVm"}
        assert conversation.conversation_id == "c-new"


class TestConstruction:

    @pytest.mark.asyncio
    async def test_base_url_with_kwargs(self):
        async with BridgeClient("https://bridge.test/", api_key="anon", max_retries=1) as client:
            assert client.config.base_url == "https://bridge.test"
            assert client.config.retry.max_retries == 1

    def test_config_and_kwargs_conflict(self):
        with pytest.raises(TypeError):
            BridgeClient(config=BridgeClientConfig(base_url=BASE_URL), max_retries=1)
