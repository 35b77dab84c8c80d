"""Gemini image generation client."""

import json
from typing import Any, Dict, Optional
import httpx

from .base import BaseProvider
from ..models.schemas import UpscaleRequest
from ..utils.logger import get_logger
from ..utils.errors import (
    AuthenticationError,
    CollaboratorError,
    ProviderError,
    RateLimitError,
)

logger = get_logger(__name__)

PROVIDER = "gemini"
DEFAULT_MODEL = "gemini-2.5-flash-image"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiImageClient(BaseProvider):
    """Client for the Gemini generateContent endpoint."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Gemini client.

        Args:
            api_key: Gemini API key
            model: Image-capable model name
            base_url: API root, without the models/ segment
            timeout: Request timeout in seconds
            transport: Optional httpx transport
        """
        super().__init__(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            transport=transport,
        )
        self.model = model

    def _get_default_headers(self) -> dict:
        return {
            "x-goog-api-key": self.api_key or "",
            "Content-Type": "application/json",
        }

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def build_payload(self, request: UpscaleRequest) -> Dict[str, Any]:
        """Translate an UpscaleRequest into the generateContent body."""
        modalities = ["IMAGE"] if request.image_only else ["TEXT", "IMAGE"]
        return {
            "contents": [
                {
                    "parts": [
                        {
                            "inlineData": {
                                "mimeType": request.media_type,
                                "data": request.encoded_image,
                            }
                        },
                        {"text": request.instruction},
                    ]
                }
            ],
            "generationConfig": {
                "responseModalities": modalities,
            },
        }

    async def generate_content(self, request: UpscaleRequest) -> Dict[str, Any]:
        """
        Send one upscale request. No retries.

        Args:
            request: Assembled upscale request

        Returns:
            Decoded JSON reply

        Raises:
            CollaboratorError: On transport failure or an error reply
        """
        self._ensure_client()

        logger.info(
            f"Submitting upscale to {self.model}",
            extra={
                "model": self.model,
                "mode": request.mode.value,
                "media_type": request.media_type,
                "payload_kb": len(request.encoded_image) * 0.75 / 1024,
            }
        )

        try:
            response = await self.client.post(
                self.endpoint,
                json=self.build_payload(request),
            )
        except httpx.RequestError as e:
            logger.error(
                f"Request to {PROVIDER} failed: {e}",
                extra={"model": self.model, "error": str(e)}
            )
            raise CollaboratorError(f"Could not reach {PROVIDER}: {e}") from e

        self._handle_response_errors(response)

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(PROVIDER, "Reply was not valid JSON", response.status_code) from e

        logger.info(
            "Upscale reply received",
            extra={
                "model": self.model,
                "candidates": len(data.get("candidates") or []) if isinstance(data, dict) else 0,
            }
        )
        return data

    def _handle_response_errors(self, response: httpx.Response):
        """Handle HTTP response errors."""
        if response.status_code in (401, 403):
            raise AuthenticationError(PROVIDER, response.status_code)
        elif response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                PROVIDER,
                int(retry_after) if retry_after and retry_after.isdigit() else None
            )
        elif response.status_code >= 400:
            try:
                error_data = response.json()
                error_message = error_data.get("error", {}).get("message") or response.text
            except (ValueError, AttributeError):
                error_data = None
                error_message = response.text

            logger.error(
                f"{PROVIDER} returned {response.status_code}",
                extra={
                    "status": response.status_code,
                    "error": json.dumps(error_data) if error_data is not None else response.text,
                }
            )

            raise ProviderError(
                PROVIDER,
                error_message,
                response.status_code
            )
