import asyncio
import json

from fastapi.testclient import TestClient

from conftest import make_settings
from main import create_app
from responders import MOCK_TRANSCRIPT, Transcriber

WAV_HEADERS = {"Content-Type": "audio/wav"}


class RecordingTranscriber(Transcriber):
    def __init__(self):
        self.calls = []

    def transcribe(self, audio: bytes, content_type: str) -> str:
        self.calls.append((audio, content_type))
        return f"{len(audio)} bytes"


class BrokenTranscriber(Transcriber):
    def transcribe(self, audio: bytes, content_type: str) -> str:
        raise OSError("decoder crashed")


def test_voice_returns_mock_transcript(client):
    response = client.post("/api/process-voice", content=b"RIFF....WAVE", headers=WAV_HEADERS)

    assert response.status_code == 200
    assert response.json() == {"text": MOCK_TRANSCRIPT}


def test_voice_does_not_require_auth(client):
    response = client.post("/api/process-voice", content=b"", headers=WAV_HEADERS)
    assert response.status_code == 200


def test_voice_passes_wav_bytes_to_transcriber():
    transcriber = RecordingTranscriber()
    app = create_app(make_settings(), transcriber=transcriber)

    with TestClient(app) as client:
        wav = client.post("/api/process-voice", content=b"abcd", headers=WAV_HEADERS)
        other = client.post(
            "/api/process-voice", content=b"abcd", headers={"Content-Type": "text/plain"}
        )

    assert wav.json() == {"text": "4 bytes"}
    assert other.json() == {"text": "0 bytes"}
    assert transcriber.calls[0] == (b"abcd", "audio/wav")


def test_voice_rejects_oversized_audio():
    app = create_app(make_settings(max_audio_bytes=8))

    with TestClient(app) as client:
        response = client.post("/api/process-voice", content=b"x" * 9, headers=WAV_HEADERS)

    assert response.status_code == 413
    assert "error" in response.json()


def test_voice_failure_maps_to_500():
    app = create_app(make_settings(), transcriber=BrokenTranscriber())

    with TestClient(app) as client:
        response = client.post("/api/process-voice", content=b"abcd", headers=WAV_HEADERS)

    assert response.status_code == 500
    assert response.json() == {"error": "Voice processing failed"}


def post_chunks(app, chunks, headers):
    """Sends a chunked body straight to the ASGI app, counting how many chunks it pulled."""
    pending = iter(chunks)
    consumed = []
    sent = []

    async def receive():
        chunk = next(pending, None)
        if chunk is None:
            return {"type": "http.request", "body": b"", "more_body": False}
        consumed.append(chunk)
        return {"type": "http.request", "body": chunk, "more_body": True}

    async def send(message):
        sent.append(message)

    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "POST",
        "scheme": "http",
        "path": "/api/process-voice",
        "raw_path": b"/api/process-voice",
        "root_path": "",
        "query_string": b"",
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
        "client": ("testclient", 50000),
        "server": ("testserver", 80),
    }
    asyncio.run(app(scope, receive, send))

    status = next(m["status"] for m in sent if m["type"] == "http.response.start")
    body = b"".join(m.get("body", b"") for m in sent if m["type"] == "http.response.body")
    return status, json.loads(body), len(consumed)


def test_voice_stops_reading_once_the_limit_is_passed():
    app = create_app(make_settings(max_audio_bytes=8))

    status, body, consumed = post_chunks(app, [b"x" * 1024] * 1000, WAV_HEADERS)

    assert status == 413
    assert "error" in body
    assert consumed <= 2


def test_voice_rejects_declared_length_before_reading():
    app = create_app(make_settings(max_audio_bytes=8))
    headers = dict(WAV_HEADERS, **{"Content-Length": "10000"})

    status, _, consumed = post_chunks(app, [b"abc"], headers)

    assert status == 413
    assert consumed == 0


def test_voice_joins_streamed_chunks_within_the_limit():
    transcriber = RecordingTranscriber()
    app = create_app(make_settings(max_audio_bytes=8), transcriber=transcriber)

    status, body, consumed = post_chunks(app, [b"ab", b"cd", b"ef"], WAV_HEADERS)

    assert status == 200
    assert body == {"text": "6 bytes"}
    assert consumed == 3
    assert transcriber.calls[0][0] == b"abcdef"
