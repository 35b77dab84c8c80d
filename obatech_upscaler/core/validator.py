"""Pre-flight checks on a candidate file's metadata."""

from ..models.enums import RejectionReason
from ..models.schemas import ValidationOutcome
from ..utils.logger import get_logger

logger = get_logger(__name__)

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB

# image/jpg is not registered but some browsers still report it
ACCEPTED_IMAGE_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png"})


def normalize_media_type(media_type: str) -> str:
    """Lower-case a media type and drop any parameters."""
    return (media_type or "").split(";", 1)[0].strip().lower()


class InputValidator:
    """Accepts JPEG/PNG files up to MAX_FILE_SIZE."""

    def __init__(self, max_file_size: int = MAX_FILE_SIZE):
        self.max_file_size = max_file_size

    def validate(self, media_type: str, size: int) -> ValidationOutcome:
        """
        Check declared type and byte size without touching the content.

        Args:
            media_type: Declared media type of the file
            size: Size of the file in bytes

        Returns:
            ValidationOutcome, rejected with INVALID_TYPE or TOO_LARGE

        Raises:
            ValueError: If size is negative
        """
        if size < 0:
            raise ValueError(f"File size cannot be negative: {size}")

        if normalize_media_type(media_type) not in ACCEPTED_IMAGE_TYPES:
            logger.info(
                "Rejected file with unsupported type",
                extra={"media_type": media_type, "size": size}
            )
            return ValidationOutcome.reject(
                RejectionReason.INVALID_TYPE,
                "Invalid file type. Please upload a JPG or PNG image.",
            )

        if size > self.max_file_size:
            logger.info(
                "Rejected file over size limit",
                extra={"size": size, "max_size": self.max_file_size}
            )
            return ValidationOutcome.reject(
                RejectionReason.TOO_LARGE,
                f"File is too large. Maximum size is {self.max_file_size // (1024 * 1024)}MB.",
            )

        return ValidationOutcome.accept()
