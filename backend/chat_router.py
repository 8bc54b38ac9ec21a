import logging
from fastapi import APIRouter, Depends, Request
from auth import Identity, get_current_user
from chat_service import ChatResponder
from dependencies import get_app_settings, get_chat_responder, get_transcriber
from errors import PayloadTooLarge, VoiceProcessingError
import schemas

logger = logging.getLogger(__name__)

chat_router = APIRouter(
    prefix="/api",
    tags=["Chat"],
    responses={code: {"model": schemas.ErrorResponse} for code in (400, 401, 413, 500)},
)

AUDIO_CONTENT_TYPE = "audio/wav"

async def read_audio(request: Request, limit: int) -> bytes:
    """Reads the body chunk by chunk and stops as soon as it grows past limit bytes."""
    too_large = PayloadTooLarge(f"Audio exceeds {limit} bytes")
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        raise too_large

    audio = bytearray()
    async for chunk in request.stream():
        audio.extend(chunk)
        if len(audio) > limit:
            raise too_large
    return bytes(audio)

@chat_router.post("/chat", response_model=schemas.ChatResponse)
def chat_with_bot(
    request: schemas.ChatRequest,
    identity: Identity = Depends(get_current_user),
    responder: ChatResponder = Depends(get_chat_responder),
):
    """Stores the user's message and the bot's reply under the session, creating one if needed."""
    result = responder.handle(identity.user_id, request.message, request.session_id)
    return schemas.ChatResponse(response=result.response, session_id=result.session_id)

@chat_router.post("/process-voice", response_model=schemas.VoiceResponse)
async def process_voice(
    request: Request,
    transcriber=Depends(get_transcriber),
    settings=Depends(get_app_settings),
):
    """
    Accepts raw audio/wav bytes and returns a transcript. Bodies of any other
    content type are not read as audio, so the transcriber receives no bytes.
    """
    content_type = request.headers.get("content-type", "")
    audio = b""
    if content_type.split(";")[0].strip().lower() == AUDIO_CONTENT_TYPE:
        audio = await read_audio(request, settings.max_audio_bytes)

    try:
        text = transcriber.transcribe(audio, content_type)
    except Exception as e:
        logger.exception("Voice processing error: %s", e)
        raise VoiceProcessingError() from e

    return schemas.VoiceResponse(text=text)
