"""Pydantic schemas for data validation."""

from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from .enums import EnhancementMode, ResultStatus, RejectionReason, SessionStatus


class SourceImage(BaseModel):
    """User-selected image, backed by in-memory bytes or a file on disk."""
    media_type: str
    size: int = Field(ge=0)
    file_name: Optional[str] = None
    content: Optional[bytes] = None
    path: Optional[Path] = None

    @model_validator(mode="after")
    def _one_byte_source(self) -> "SourceImage":
        if (self.content is None) == (self.path is None):
            raise ValueError("SourceImage needs exactly one of content or path")
        return self


class UpscaleRequest(BaseModel):
    """Fully assembled call to the image-generation service."""
    encoded_image: str
    media_type: str
    instruction: str
    mode: EnhancementMode
    image_only: bool = True


class UpscaledImage(BaseModel):
    """Image returned by the service, still base64 encoded."""
    media_type: str
    data: str

    @property
    def data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.data}"


class UpscaleResult(BaseModel):
    """Settled outcome of one upscale request."""
    status: ResultStatus
    image: Optional[UpscaledImage] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def succeeded(cls, data: str, media_type: str) -> "UpscaleResult":
        return cls(
            status=ResultStatus.SUCCEEDED,
            image=UpscaledImage(media_type=media_type, data=data),
        )

    @classmethod
    def failed(cls, message: str, code: str) -> "UpscaleResult":
        return cls(status=ResultStatus.FAILED, error=message, error_code=code)

    @property
    def ok(self) -> bool:
        return self.status == ResultStatus.SUCCEEDED


class ValidationOutcome(BaseModel):
    """Result of checking a candidate file's metadata."""
    accepted: bool
    reason: Optional[RejectionReason] = None
    message: Optional[str] = None

    @classmethod
    def accept(cls) -> "ValidationOutcome":
        return cls(accepted=True)

    @classmethod
    def reject(cls, reason: RejectionReason, message: str) -> "ValidationOutcome":
        return cls(accepted=False, reason=reason, message=message)


class SessionSnapshot(BaseModel):
    """Read-only view of the upscale session."""
    status: SessionStatus
    mode: EnhancementMode
    file_name: Optional[str] = None
    media_type: Optional[str] = None
    size: Optional[int] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    image_url: Optional[str] = None
    download_name: Optional[str] = None
