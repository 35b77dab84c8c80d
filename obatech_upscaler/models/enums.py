"""Enumerations for the upscaler."""

from enum import Enum


class EnhancementMode(str, Enum):
    """Target resolution tier."""
    TWO_K = "2k"
    FOUR_K = "4k"


class SessionStatus(str, Enum):
    """Visible state of the upscale session."""
    IDLE = "idle"
    VALIDATING = "validating"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ResultStatus(str, Enum):
    """Outcome of a settled upscale request."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RejectionReason(str, Enum):
    """Why a candidate file was not accepted."""
    INVALID_TYPE = "InvalidType"
    TOO_LARGE = "TooLarge"
