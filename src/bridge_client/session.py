"""
Выдача messaging-сессий.

Каждая messaging-операция (inbox, thread, send, ack) сначала получает
свежую сессию через ``POST /session/issue``. Сессии не кешируются и не
переиспользуются между операциями.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .core.context import Request
from .core.executor import RequestExecutor
from .models import expect_object, require_str

SESSION_ISSUE_PATH = "/session/issue"


class SessionPurpose(str, Enum):
    """Назначение сессии."""
    MESSAGE_RECEIVE = "message_receive"
    MESSAGE_SEND = "message_send"


@dataclass(frozen=True)
class Session:
    """
    Короткоживущая сессия, привязанная к назначению и беседе.

    Attributes:
        session_id: Идентификатор от bridge
        purpose: Назначение
        conversation_id: Беседа (None = вся очередь, только для inbox)
        server_time: Время сервера (ISO 8601), если вернулось
    """
    session_id: str
    purpose: SessionPurpose
    conversation_id: Optional[str] = None
    server_time: Optional[str] = None


class SessionIssuer:
    """
    Протокол выдачи сессий поверх RequestExecutor.

    Запрос выдачи проходит через тот же executor, поэтому наследует
    таймаут и retry (POST ретраится только по 5xx/408).

    Example:
        >>> issuer = SessionIssuer(executor)
        >>> session = await issuer.issue(SessionPurpose.MESSAGE_SEND, "conv_1")
    """

    def __init__(self, executor: RequestExecutor):
        self._executor = executor

    async def issue(
        self,
        purpose: SessionPurpose,
        conversation_id: Optional[str] = None,
    ) -> Session:
        """
        Получить новую сессию.

        Args:
            purpose: Назначение сессии
            conversation_id: Беседа; обязательна для MESSAGE_SEND

        Returns:
            Session

        Raises:
            ValueError: MESSAGE_SEND без conversation_id
            ParseError: В ответе нет sessionId
        """
        purpose = SessionPurpose(purpose)
        if purpose is SessionPurpose.MESSAGE_SEND and not conversation_id:
            raise ValueError("conversation_id is required for message_send sessions")

        data = await self._executor.execute(Request(
            "POST",
            SESSION_ISSUE_PATH,
            body={"purpose": purpose.value, "conversationId": conversation_id},
        ))
        data = expect_object(data, "session/issue")

        return Session(
            session_id=require_str(data, "sessionId", "session/issue"),
            purpose=purpose,
            conversation_id=conversation_id,
            server_time=data.get("serverTime"),
        )
