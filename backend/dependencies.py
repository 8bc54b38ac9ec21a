from fastapi import Depends, Request
from sqlalchemy.orm import Session

from chat_service import ChatResponder
from message_log import MessageLog
from user_store import UserStore

def get_context(request: Request):
    """The AppContext built by create_app()."""
    return request.app.state.context

def get_app_settings(context=Depends(get_context)):
    return context.settings

def get_db(context=Depends(get_context)):
    """Provides a fresh database session and closes it after the request."""
    db = context.session_factory()
    try:
        yield db
    finally:
        db.close()

def get_user_store(db: Session = Depends(get_db)) -> UserStore:
    return UserStore(db)

def get_message_log(db: Session = Depends(get_db)) -> MessageLog:
    return MessageLog(db)

def get_token_service(context=Depends(get_context)):
    return context.tokens

def get_transcriber(context=Depends(get_context)):
    return context.transcriber

def get_chat_responder(
    log: MessageLog = Depends(get_message_log),
    context=Depends(get_context),
) -> ChatResponder:
    return ChatResponder(log, context.response_generator, atomic=context.settings.atomic_chat_writes)
