"""Custom exception classes for the upscaler."""

from typing import Optional


class UpscalerError(Exception):
    """Base exception for all upscaler errors."""
    code = "UpscalerError"


class ConfigurationError(UpscalerError):
    """Configuration or initialization errors."""
    code = "ConfigurationError"


class MissingCredentialError(ConfigurationError):
    """The collaborator API key is not configured."""
    code = "MissingCredential"

    def __init__(self, variable: str = "API_KEY"):
        self.variable = variable
        super().__init__(f"{variable} environment variable is not set.")


class EncodingError(UpscalerError):
    """Source bytes could not be read or encoded for transport."""
    code = "EncodingError"


class CollaboratorError(UpscalerError):
    """The call to the image-generation service failed."""
    code = "CollaboratorError"


class ProviderError(CollaboratorError):
    """Provider API error with status code."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        self.provider = provider
        self.status_code = status_code
        super().__init__(f"{provider} error: {message}")


class AuthenticationError(ProviderError):
    """API authentication failed."""

    def __init__(self, provider: str, status_code: int = 401):
        super().__init__(provider, "Authentication failed", status_code)


class RateLimitError(ProviderError):
    """API rate limit exceeded."""

    def __init__(self, provider: str, retry_after: Optional[int] = None):
        self.retry_after = retry_after
        message = "Rate limit exceeded"
        if retry_after:
            message += f", retry after {retry_after}s"
        super().__init__(provider, message, 429)


class NoUsableImageError(UpscalerError):
    """The service replied without image content."""
    code = "NoUsableImageInResponse"


class NoImageSelectedError(UpscalerError):
    """Upscale was requested before an image was selected."""
    code = "NoImageSelected"


class RequestInFlightError(UpscalerError):
    """An upscale request is already running for this session."""
    code = "RequestInFlight"


class RequestCancelledError(UpscalerError):
    """An in-flight upscale request was cancelled before settling."""
    code = "RequestCancelled"
