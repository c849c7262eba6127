"""Speech-to-text client."""

import base64
import logging

from ..models.api import TranscribeRequest, TranscribeResponse
from .base import AbstractServiceClient

logger = logging.getLogger(__name__)


class TranscriptionClient(AbstractServiceClient):
    """Sends recorded audio to the STT service and returns the transcript."""

    label = "Transcription"

    async def transcribe(self, audio: bytes) -> str:
        """Transcribe a WAV clip.

        Args:
            audio: Raw WAV bytes; sent base64-encoded

        Returns:
            Transcript text, '' when the service heard nothing
        """
        encoded = base64.b64encode(audio).decode("ascii")
        logger.info(f"Transcribing {len(audio)} bytes of audio")
        response = await self._post(TranscribeRequest(audio=encoded), TranscribeResponse)
        return response.text
