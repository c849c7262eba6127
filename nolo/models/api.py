"""Request and response bodies exchanged with the STT, LLM and TTS services."""

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class _ServiceResponse(BaseModel):
    """Responses may carry extra keys; missing or null text fields read as ''."""
    model_config = ConfigDict(extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class TranscribeRequest(BaseModel):
    audio: str  # Base64-encoded WAV


class TranscribeResponse(_ServiceResponse):
    text: str = ""


class ChatRequest(BaseModel):
    prompt: str


class ChatResponse(_ServiceResponse):
    reply: str = ""


class SpeechRequest(BaseModel):
    text: str


class SpeechResponse(_ServiceResponse):
    audio_url: str = ""
