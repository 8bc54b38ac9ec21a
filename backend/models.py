import enum
from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, Text, DateTime
from database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Sender(str, enum.Enum):
    USER = "user"
    BOT = "bot"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(150), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    hashed_password = Column(String, nullable=False)


class ChatMessage(Base):
    """One chat turn. user_id is a soft reference to users.id."""

    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(64), index=True, nullable=False)
    text = Column(Text, nullable=False)
    sender = Column(String(8), nullable=False)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user_id = Column(Integer, index=True, nullable=False)
