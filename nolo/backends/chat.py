"""Language model chat client."""

import logging

from ..models.api import ChatRequest, ChatResponse
from .base import AbstractServiceClient

logger = logging.getLogger(__name__)


class ChatClient(AbstractServiceClient):
    """Sends the transcript as a prompt and returns the model's reply."""

    label = "Chat"

    async def chat(self, prompt: str) -> str:
        logger.info(f"Sending prompt ({len(prompt)} chars)")
        response = await self._post(ChatRequest(prompt=prompt), ChatResponse)
        return response.reply
