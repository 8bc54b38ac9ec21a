import logging
from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

from database import transaction
from errors import ChatProcessingError
from message_log import MessageLog
from models import Sender
from responders import ResponseGenerator

logger = logging.getLogger(__name__)


@dataclass
class ChatResult:
    response: str
    session_id: str


class ChatResponder:
    """
    Stores a user turn, produces the reply and stores the bot turn.

    By default each append commits on its own, so a failure after the first
    write leaves the user message saved (at-least-once, non-atomic). With
    atomic=True both appends share one transaction and are rolled back together.
    """

    def __init__(self, log: MessageLog, generator: ResponseGenerator, atomic: bool = False):
        self.log = log
        self.generator = generator
        self.atomic = atomic

    def handle(self, user_id: int, message: str, session_id: Optional[str] = None) -> ChatResult:
        session_id = session_id or str(uuid4())

        try:
            if self.atomic:
                with transaction(self.log.db):
                    response = self._exchange(user_id, message, session_id, commit=False)
            else:
                response = self._exchange(user_id, message, session_id, commit=True)
        except Exception as e:
            logger.exception("Chat failed for user %s in session %s: %s", user_id, session_id, e)
            raise ChatProcessingError() from e

        logger.info("Chat turn stored (user: %s, session: %s)", user_id, session_id)
        return ChatResult(response=response, session_id=session_id)

    def _exchange(self, user_id: int, message: str, session_id: str, commit: bool) -> str:
        self.log.append(session_id, message, Sender.USER, user_id, commit=commit)
        response = self.generator.generate(message)
        self.log.append(session_id, response, Sender.BOT, user_id, commit=commit)
        return response
