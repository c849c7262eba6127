"""Base class for the JSON-over-HTTP service clients."""

import logging
from abc import ABC
from typing import Optional, Type, TypeVar

import aiohttp
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

ResponseModel = TypeVar("ResponseModel", bound=BaseModel)

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class ServiceError(Exception):
    """A service call failed; the message is safe to show to the user."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class AbstractServiceClient(ABC):
    """POSTs a JSON body to one endpoint and validates the JSON reply.

    Subclasses set ``label``, which prefixes every failure message
    (e.g. "Chat failed: 502").
    """

    label = "Request"

    def __init__(self, url: str, timeout_seconds: float = 30.0):
        """Initialize service client.

        Args:
            url: Full endpoint URL
            timeout_seconds: Total time allowed for one request
        """
        self.url = url
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        logger.info(f"{type(self).__name__} initialized with endpoint: {url}")

    async def _post(self, body: BaseModel, response_model: Type[ResponseModel]) -> ResponseModel:
        """Send one request and parse the reply.

        Raises:
            ServiceError: On a non-2xx status or a body that does not match
                response_model
            aiohttp.ClientError: On connection failures
        """
        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.post(self.url, headers=JSON_HEADERS, json=body.model_dump()) as response:
                if not 200 <= response.status < 300:
                    error_text = await response.text()
                    logger.error(f"{self.label} error: {response.status} - {error_text[:200]}")
                    raise ServiceError(f"{self.label} failed: {response.status}", status=response.status)

                try:
                    payload = await response.json(content_type=None)
                except ValueError as e:
                    raise ServiceError(f"{self.label} failed: invalid JSON response") from e

        if not isinstance(payload, dict):
            raise ServiceError(f"{self.label} failed: unexpected response")
        try:
            return response_model.model_validate(payload)
        except ValidationError as e:
            logger.error(f"{self.label} returned an unexpected body: {e}")
            raise ServiceError(f"{self.label} failed: unexpected response") from e
