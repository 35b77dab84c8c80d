"""Base64 transport encoding for image bytes."""

import asyncio
import base64
import binascii

from ..models.schemas import SourceImage
from ..utils.errors import EncodingError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class TransportEncoder:
    """Turns source images into base64 text and back."""

    async def read_bytes(self, source: SourceImage) -> bytes:
        """
        Load the raw bytes of a selected image.

        Path-backed images are read in a worker thread so the event
        loop is not blocked.

        Raises:
            EncodingError: If the file cannot be read
        """
        if source.content is not None:
            return source.content

        try:
            data = await asyncio.to_thread(source.path.read_bytes)
        except OSError as e:
            logger.error(
                f"Failed to read source image: {e}",
                extra={"path": str(source.path), "error": str(e)}
            )
            raise EncodingError(f"Could not read {source.path.name}: {e}") from e

        logger.debug(
            "Read source image from disk",
            extra={"path": str(source.path), "bytes_size": len(data)}
        )
        return data

    def encode(self, data: bytes) -> str:
        """Encode bytes as base64 text without a data URL prefix."""
        return base64.b64encode(data).decode("ascii")

    def decode(self, text: str) -> bytes:
        """
        Decode base64 text, accepting an optional data URL prefix.

        Raises:
            EncodingError: If the text is not valid base64
        """
        if text.startswith("data:") and "," in text:
            text = text.split(",", 1)[1]

        try:
            return base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError) as e:
            raise EncodingError(f"Invalid base64 image data: {e}") from e

    async def encode_source(self, source: SourceImage) -> str:
        """Read a source image and return its transport encoding."""
        return self.encode(await self.read_bytes(source))
