"""Turns a generateContent reply into an upscale result."""

from typing import Any, Mapping, Optional

from ..models.schemas import UpscaleResult
from ..utils.errors import NoUsableImageError
from ..utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_MEDIA_TYPE = "image/png"
NO_IMAGE_MESSAGE = "The AI did not return an image. Please try again."


def _first(items: Any) -> Optional[Mapping[str, Any]]:
    if isinstance(items, list) and items and isinstance(items[0], Mapping):
        return items[0]
    return None


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


class ResponseInterpreter:
    """
    Extracts the upscaled image from a service reply.

    Only the first part of the first candidate is consulted. Replies
    with the image anywhere else are treated as unusable.
    """

    def interpret(self, reply: Any) -> UpscaleResult:
        """
        Classify a raw reply.

        Args:
            reply: Decoded JSON body of the service reply

        Returns:
            Succeeded result with the inline image, or a failed result
        """
        candidate = _first(reply.get("candidates")) if isinstance(reply, Mapping) else None

        if candidate is not None and candidate.get("finishReason"):
            logger.debug(
                "First candidate finished",
                extra={"finish_reason": candidate.get("finishReason")}
            )

        content = candidate.get("content") if candidate is not None else None
        part = _first(content.get("parts")) if isinstance(content, Mapping) else None
        inline = part.get("inlineData") if part is not None else None
        data = inline.get("data") if isinstance(inline, Mapping) else None

        if not _non_empty_str(data):
            logger.warning(
                "Reply did not contain an inline image",
                extra={
                    "has_candidate": candidate is not None,
                    "has_part": part is not None,
                    "part_keys": sorted(part.keys()) if part is not None else [],
                }
            )
            return UpscaleResult.failed(NO_IMAGE_MESSAGE, NoUsableImageError.code)

        media_type = inline.get("mimeType")
        if not _non_empty_str(media_type):
            media_type = DEFAULT_MEDIA_TYPE
        logger.info(
            "Reply contained an inline image",
            extra={"media_type": media_type, "encoded_length": len(data)}
        )
        return UpscaleResult.succeeded(data=data, media_type=media_type)
