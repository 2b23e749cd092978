"""
AI gateway client.

Sends the prompt and source photo to an OpenAI-compatible chat-completions
endpoint with image output enabled and hands back the decoded JSON body as-is.
Finding the image inside that body is ``relight.extraction``'s job.
"""

import base64
import logging
from typing import Optional

import httpx

from relight.config import AI_GATEWAY_URL, GATEWAY_TIMEOUT, GENERATION_TEMPERATURE, IMAGE_MODEL
from relight.errors import GatewayError

logger = logging.getLogger(__name__)

MAX_ERROR_BODY = 500


def to_data_url(data: bytes, content_type: str) -> str:
    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


class GatewayClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = AI_GATEWAY_URL,
        model: str = IMAGE_MODEL,
        timeout: float = GATEWAY_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self.timeout = timeout
        self.transport = transport

    def build_payload(self, prompt: str, image: bytes, content_type: str) -> dict:
        # the gateway wants the image inline as base64, not as a URL
        return {
            "model": self.model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": to_data_url(image, content_type)}},
                    ],
                }
            ],
            "temperature": GENERATION_TEMPERATURE,
            "modalities": ["text", "image"],
        }

    async def generate(self, prompt: str, image: bytes, content_type: str) -> dict:
        """
        Request one relit image.

        Raises GatewayError on any HTTP status >= 400 or transport failure;
        there are no retries.
        """
        payload = self.build_payload(prompt, image, content_type)
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        logger.info("Calling AI gateway with model %s", self.model)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.base_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise GatewayError(f"AI gateway request failed: {e}") from e

        if response.status_code >= 400:
            body = response.text[:MAX_ERROR_BODY]
            logger.error("AI gateway returned %s: %s", response.status_code, body)
            raise GatewayError(
                f"AI gateway request failed with status {response.status_code}: {body}",
                upstream_status=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise GatewayError(f"AI gateway returned a non-JSON body: {response.text[:MAX_ERROR_BODY]}") from e
