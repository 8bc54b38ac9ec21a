import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import models
from errors import StoreError

logger = logging.getLogger(__name__)


class MessageLog:
    """Append-only store of chat turns."""

    def __init__(self, db: Session):
        self.db = db

    def append(self, session_id: str, text: str, sender: models.Sender, user_id: int,
               commit: bool = True) -> models.ChatMessage:
        """Inserts one turn. With commit=False the row is only flushed; the caller owns the transaction."""
        message = models.ChatMessage(
            session_id=session_id,
            text=text,
            sender=models.Sender(sender).value,
            user_id=user_id,
        )
        self.db.add(message)
        try:
            if commit:
                self.db.commit()
                self.db.refresh(message)
            else:
                self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("Could not save message") from e

        logger.debug("Saved %s message in session %s", message.sender, session_id)
        return message
