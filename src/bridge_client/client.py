# src/bridge_client/client.py
"""
BridgeClient - публичный фасад над RequestExecutor.

Все методы асинхронные. Messaging-операции (inbox, thread, send, ack)
перед основным вызовом всегда получают свежую сессию через SessionIssuer.
"""

import random
import time
from typing import Any, Callable, Dict, List, Optional

import httpx

from .core.config import BridgeClientConfig
from .core.context import Request, new_request_id
from .core.executor import RequestExecutor, ValueProvider
from .core.retry_engine import SleepFunc
from .models import (
    AckResult,
    ConnectAck,
    Conversation,
    DisconnectResponse,
    HealthResponse,
    LockResponse,
    MessageList,
    SendResult,
    StatusResponse,
    UnlockResponse,
    UnlockStatusResponse,
)
from .session import SessionIssuer, SessionPurpose
from .status_poller import BridgeUiStatus, StatusPoller

CONNECT_INTENT_VERSION = 1


class BridgeClient:
    """
    Асинхронный клиент bridge.

    Example:
        >>> async with BridgeClient("https://bridge.example.com",
        ...                         token_provider=get_access_token) as client:
        ...     health = await client.health()
        ...     inbox = await client.fetch_inbox(limit=20)
        ...     await client.send_message(inbox.items[0].conversation_id, "aGVsbG8=")

    Args:
        base_url: Базовый URL (игнорируется, если передан config)
        config: BridgeClientConfig
        token_provider: sync/async () -> Optional[str], вызывается на каждой попытке
        user_id_provider: sync/async () -> Optional[str] для X-User-Id
        sleep: Асинхронный sleep для backoff
        clock: Часы для кеша /status и Retry-After (epoch секунды)
        rand: Источник случайности для jitter
        transport: Кастомный httpx transport
        **config_kwargs: Параметры BridgeClientConfig.create (если нет config)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        config: Optional[BridgeClientConfig] = None,
        token_provider: Optional[ValueProvider] = None,
        user_id_provider: Optional[ValueProvider] = None,
        sleep: Optional[SleepFunc] = None,
        clock: Callable[[], float] = time.time,
        rand: Callable[[], float] = random.random,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **config_kwargs: Any,
    ):
        if config is None:
            config = BridgeClientConfig.create(base_url=base_url or "", **config_kwargs)
        elif config_kwargs:
            raise TypeError("Pass either config or config keyword arguments, not both")

        self._config = config
        self._executor = RequestExecutor(
            config,
            token_provider=token_provider,
            user_id_provider=user_id_provider,
            sleep=sleep,
            rand=rand,
            clock=clock,
            transport=transport,
        )
        self._sessions = SessionIssuer(self._executor)
        self._status_poller = StatusPoller(self._executor, config.status_cache, clock=clock)

    @property
    def config(self) -> BridgeClientConfig:
        return self._config

    @property
    def status_poller(self) -> StatusPoller:
        return self._status_poller

    async def close(self) -> None:
        await self._executor.close()

    async def __aenter__(self) -> "BridgeClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ==================== Gateway ====================

    async def health(self) -> HealthResponse:
        """GET /health без авторизационных заголовков."""
        data = await self._executor.execute(Request("GET", "/health", auth=False))
        return HealthResponse.from_dict(data)

    async def status(self) -> StatusResponse:
        """GET /status напрямую, мимо кеша."""
        data = await self._executor.execute(Request("GET", self._config.status_cache.status_path))
        return StatusResponse.from_dict(data)

    async def fetch_status(self) -> BridgeUiStatus:
        """Статус для UI через общий кеш StatusPoller."""
        return await self._status_poller.fetch_status()

    async def connect(self, target_url: str) -> ConnectAck:
        """
        Отправить connect_intent.

        Возвращает только подтверждение приёма; результат подключения
        наблюдается через /status.
        """
        if not target_url:
            raise ValueError("target_url is required")

        request_id = new_request_id()
        data = await self._executor.execute(Request(
            "POST",
            "/connect",
            body={
                "v": CONNECT_INTENT_VERSION,
                "type": "connect_intent",
                "requestId": request_id,
                "targetUrl": target_url,
            },
            request_id=request_id,
        ))
        return ConnectAck.from_dict(data)

    async def disconnect(self) -> DisconnectResponse:
        data = await self._executor.execute(Request("POST", "/disconnect"))
        return DisconnectResponse.from_dict(data)

    # ==================== Identity lock ====================

    async def unlock_status(self) -> UnlockStatusResponse:
        data = await self._executor.execute(Request("GET", "/unlock/status"))
        return UnlockStatusResponse.from_dict(data)

    async def unlock(self, password: str) -> UnlockResponse:
        """POST /unlock. Пароль маскируется в логах."""
        data = await self._executor.execute(Request("POST", "/unlock", body={"password": password}))
        return UnlockResponse.from_dict(data)

    async def lock(self) -> LockResponse:
        data = await self._executor.execute(Request("POST", "/lock"))
        # Ответ пустой при успехе: {} -> LockResponse(state=None)
        return LockResponse.from_dict(data)

    # ==================== Messaging ====================

    async def create_conversation(
        self,
        peer_fingerprint: str,
        peer_ref_encrypted_b64: Optional[str] = None,
    ) -> Conversation:
        """
        Получить conversation_id для пира.

        Сервер идемпотентен: повторный вызов с тем же fingerprint
        возвращает тот же conversation_id.
        """
        if not peer_fingerprint:
            raise ValueError("peer_fingerprint is required")

        body: Dict[str, Any] = {"peerFingerprint": peer_fingerprint}
        if peer_ref_encrypted_b64 is not None:
            body["peerRefEncryptedB64"] = peer_ref_encrypted_b64

        data = await self._executor.execute(Request("POST", "/conversation/create", body=body))
        return Conversation.from_dict(data)

    async def fetch_inbox(self, limit: Optional[int] = None) -> MessageList:
        """
        Доступные (не consumed) сообщения всей очереди.

        Сессия: message_receive без conversation_id.
        """
        session = await self._sessions.issue(SessionPurpose.MESSAGE_RECEIVE, None)

        body: Dict[str, Any] = {"sessionId": session.session_id}
        if limit is not None:
            body["limit"] = limit

        data = await self._executor.execute(Request("POST", "/message/inbox", body=body))
        return MessageList.from_dict(data)

    async def fetch_thread(
        self,
        conversation_id: str,
        limit: Optional[int] = None,
        include_consumed: Optional[bool] = None,
    ) -> MessageList:
        """
        История беседы (включая consumed), newest-first.

        Сессия: message_receive для conversation_id.
        """
        if not conversation_id:
            raise ValueError("conversation_id is required")

        session = await self._sessions.issue(SessionPurpose.MESSAGE_RECEIVE, conversation_id)

        body: Dict[str, Any] = {
            "sessionId": session.session_id,
            "conversationId": conversation_id,
        }
        if limit is not None:
            body["limit"] = limit
        if include_consumed is not None:
            body["includeConsumed"] = include_consumed

        data = await self._executor.execute(Request("POST", "/message/thread", body=body))
        return MessageList.from_dict(data)

    async def send_message(self, conversation_id: str, plaintext_b64: str) -> SendResult:
        """
        Отправить сообщение в беседу.

        conversation_id должен быть выдан сервером (create_conversation),
        клиент его не генерирует. Шифрование выполняет bridge.
        """
        session = await self._sessions.issue(SessionPurpose.MESSAGE_SEND, conversation_id)

        data = await self._executor.execute(Request(
            "POST",
            "/message/send",
            body={
                "sessionId": session.session_id,
                "conversationId": conversation_id,
                "plaintextB64": plaintext_b64,
            },
        ))
        return SendResult.from_dict(data)

    async def ack_messages(
        self,
        conversation_id: str,
        envelope_fingerprints: List[str],
    ) -> AckResult:
        """Пометить сообщения consumed (учёт доставки, не read receipt)."""
        if not conversation_id:
            raise ValueError("conversation_id is required")

        session = await self._sessions.issue(SessionPurpose.MESSAGE_RECEIVE, conversation_id)

        data = await self._executor.execute(Request(
            "POST",
            "/message/ack",
            body={
                "sessionId": session.session_id,
                "conversationId": conversation_id,
                "envelopeFingerprints": list(envelope_fingerprints),
            },
        ))
        return AckResult.from_dict(data)
