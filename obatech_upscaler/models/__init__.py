"""Data models and schemas for the upscaler."""

from .schemas import (
    SourceImage,
    UpscaleRequest,
    UpscaledImage,
    UpscaleResult,
    ValidationOutcome,
    SessionSnapshot,
)
from .enums import (
    EnhancementMode,
    SessionStatus,
    ResultStatus,
    RejectionReason,
)

__all__ = [
    "SourceImage",
    "UpscaleRequest",
    "UpscaledImage",
    "UpscaleResult",
    "ValidationOutcome",
    "SessionSnapshot",
    "EnhancementMode",
    "SessionStatus",
    "ResultStatus",
    "RejectionReason",
]
