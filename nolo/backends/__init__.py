"""HTTP clients for the STT, LLM and TTS services."""

from .base import AbstractServiceClient, ServiceError
from .transcription import TranscriptionClient
from .chat import ChatClient
from .speech import SpeechClient

__all__ = [
    "AbstractServiceClient",
    "ServiceError",
    "TranscriptionClient",
    "ChatClient",
    "SpeechClient",
]
