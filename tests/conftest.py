"""Pytest configuration and shared fixtures."""

from typing import Any, Dict, List, Optional

import pytest

from obatech_upscaler.core import UpscaleOrchestrator
from obatech_upscaler.models.schemas import UpscaleRequest

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def image_reply(data: str = "abc123", mime_type: Optional[str] = "image/png") -> Dict[str, Any]:
    """generateContent reply whose first part is an inline image."""
    inline = {"data": data}
    if mime_type is not None:
        inline["mimeType"] = mime_type
    return {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"inlineData": inline}]},
                "finishReason": "STOP",
            }
        ]
    }


def text_reply(text: str = "I cannot upscale this image.") -> Dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class FakeImageClient:
    """Stands in for GeminiImageClient and records every request."""

    def __init__(self, reply: Any = None, error: Optional[Exception] = None):
        self.reply = image_reply() if reply is None else reply
        self.error = error
        self.requests: List[UpscaleRequest] = []

    async def generate_content(self, request: UpscaleRequest) -> Dict[str, Any]:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def png_bytes():
    """Small PNG-looking payload."""
    return PNG_SIGNATURE + bytes(range(256)) * 4


@pytest.fixture
def fake_client():
    return FakeImageClient()


@pytest.fixture
def orchestrator(fake_client):
    return UpscaleOrchestrator(client=fake_client, api_key="test-key")
