"""
Pluggable reply and transcription backends.

The routers only see the ResponseGenerator and Transcriber interfaces; the
mock implementations below are the defaults wired in by create_app(). A real
LLM or speech-to-text backend is swapped in by passing another implementation
to create_app().
"""

from abc import ABC, abstractmethod

MOCK_TRANSCRIPT = "This is a mock voice transcript"


class ResponseGenerator(ABC):
    @abstractmethod
    def generate(self, message: str) -> str:
        """Returns the bot reply for a user message."""


class Transcriber(ABC):
    @abstractmethod
    def transcribe(self, audio: bytes, content_type: str) -> str:
        """Returns the transcript of an audio payload."""


class MockResponseGenerator(ResponseGenerator):
    template = 'I received: "{message}". This is a mock response.'

    def generate(self, message: str) -> str:
        return self.template.format(message=message)


class MockTranscriber(Transcriber):
    def transcribe(self, audio: bytes, content_type: str) -> str:
        return MOCK_TRANSCRIPT
