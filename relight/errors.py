"""
Error types raised by the generation pipeline.

Each carries the HTTP status the API layer answers with, so routes only need
one exception handler for the whole family.
"""

from typing import List, Optional


class RelightError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[List[dict]] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class InvalidInputError(RelightError):
    """Form fields or the uploaded file failed validation."""

    status_code = 400


class ConfigurationError(RelightError):
    status_code = 500


class GatewayError(RelightError):
    """
    The AI gateway rejected the request or could not be reached.

    ``upstream_status`` is the gateway's HTTP status (None for transport
    failures). Auth, missing-model and payload-size rejections are passed
    through as 401/404/413 with a readable message; everything else is a 500
    carrying the raw message.
    """

    FRIENDLY_MESSAGES = {
        401: "Authentication failed. Please check your AI gateway API key.",
        404: "Model not available. Please check AI gateway access.",
        413: "Image is too large. Please use a smaller image (max ~20MB for best results).",
    }

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        self.upstream_status = upstream_status
        status = self._map_status(upstream_status)
        super().__init__(self.FRIENDLY_MESSAGES.get(status, message), status_code=status)
        self.raw_message = message

    @staticmethod
    def _map_status(upstream_status: Optional[int]) -> int:
        if upstream_status in (401, 403):
            return 401
        if upstream_status in (404, 413):
            return upstream_status
        return 500


class NoImageGeneratedError(RelightError):
    """The gateway answered, but no image could be found in its response."""

    def __init__(self, raw_response: str):
        super().__init__("No image generated in the response")
        self.raw_response = raw_response
