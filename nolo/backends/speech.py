"""Text-to-speech client."""

import logging
from urllib.parse import urljoin

from ..models.api import SpeechRequest, SpeechResponse
from .base import AbstractServiceClient

logger = logging.getLogger(__name__)


class SpeechClient(AbstractServiceClient):
    """Asks the TTS service to voice a reply and returns where the audio lives."""

    label = "TTS"

    async def synthesize(self, text: str) -> str:
        """Synthesize speech for text.

        Returns:
            Absolute audio URL, or '' if the service returned none. Relative
            URLs are resolved against the TTS endpoint.
        """
        logger.info(f"Synthesizing speech for {len(text)} chars")
        response = await self._post(SpeechRequest(text=text), SpeechResponse)
        if not response.audio_url:
            return ""
        return urljoin(self.url, response.audio_url)
