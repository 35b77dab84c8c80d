"""Upscale session state machine and request pipeline."""

import asyncio
import mimetypes
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union

from ..models.enums import EnhancementMode, SessionStatus
from ..models.schemas import (
    SessionSnapshot,
    SourceImage,
    UpscaleRequest,
    UpscaleResult,
    ValidationOutcome,
)
from ..utils.errors import (
    MissingCredentialError,
    NoImageSelectedError,
    RequestCancelledError,
    RequestInFlightError,
    UpscalerError,
)
from ..utils.logger import get_logger
from .encoder import TransportEncoder
from .interpreter import ResponseInterpreter
from .request_builder import RequestBuilder
from .validator import InputValidator, normalize_media_type

logger = get_logger(__name__)

DOWNLOAD_PREFIX = "obatech-upscaled-"
NO_IMAGE_SELECTED_MESSAGE = "Please select an image first."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred during upscaling."
CANCELLED_MESSAGE = "The upscale request was cancelled."


class ImageGenerationClient(Protocol):
    async def generate_content(self, request: UpscaleRequest) -> Dict[str, Any]:
        ...


class UpscaleOrchestrator:
    """
    Owns one upscale session: the selected image, the mode and the
    lifecycle of at most one in-flight request.

    Status moves idle -> in_flight -> succeeded | failed. File selection
    passes through validating and returns to idle on acceptance.
    """

    def __init__(
        self,
        client: ImageGenerationClient,
        api_key: Optional[str],
        validator: Optional[InputValidator] = None,
        encoder: Optional[TransportEncoder] = None,
        builder: Optional[RequestBuilder] = None,
        interpreter: Optional[ResponseInterpreter] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            client: Image-generation service client
            api_key: Service credential; checked before every request
            validator: Input validator (default InputValidator())
            encoder: Transport encoder (default TransportEncoder())
            builder: Request builder (default RequestBuilder())
            interpreter: Response interpreter (default ResponseInterpreter())
        """
        self.client = client
        self.api_key = api_key
        self.validator = validator or InputValidator()
        self.encoder = encoder or TransportEncoder()
        self.builder = builder or RequestBuilder()
        self.interpreter = interpreter or ResponseInterpreter()

        self.status = SessionStatus.IDLE
        self.mode = EnhancementMode.TWO_K
        self.source: Optional[SourceImage] = None
        self.result: Optional[UpscaleResult] = None
        self.error: Optional[str] = None
        self.error_code: Optional[str] = None

    # ------------------------------------------------------------------
    # Inbound events
    # ------------------------------------------------------------------

    def select_file(
        self,
        media_type: str,
        size: int,
        content: Optional[bytes] = None,
        file_name: Optional[str] = None,
        path: Optional[Path] = None,
    ) -> ValidationOutcome:
        """
        Validate a candidate file and make it the current source image.

        On rejection the previous selection stays in place and the
        rejection message becomes the session error.
        """
        self._ensure_not_in_flight()

        previous_status = self.status
        self.status = SessionStatus.VALIDATING
        try:
            outcome = self.validator.validate(media_type, size)
        except ValueError:
            self.status = previous_status
            raise

        if not outcome.accepted:
            self.status = previous_status
            self.error = outcome.message
            self.error_code = outcome.reason.value
            return outcome

        try:
            self.source = SourceImage(
                media_type=normalize_media_type(media_type),
                size=size,
                file_name=file_name,
                content=content,
                path=path,
            )
        except ValueError:
            self.status = previous_status
            raise

        self.result = None
        self.error = None
        self.error_code = None
        self.status = SessionStatus.IDLE

        logger.info(
            "Source image selected",
            extra={"file_name": file_name, "media_type": media_type, "size": size}
        )
        return outcome

    def select_path(self, path: Union[str, Path]) -> ValidationOutcome:
        """Select a file on disk using only its name and stat metadata."""
        path = Path(path)
        media_type, _ = mimetypes.guess_type(path.name)
        return self.select_file(
            media_type=media_type or "application/octet-stream",
            size=path.stat().st_size,
            file_name=path.name,
            path=path,
        )

    def set_mode(self, mode: Union[EnhancementMode, str]) -> EnhancementMode:
        self._ensure_not_in_flight()
        self.mode = EnhancementMode(mode)
        return self.mode

    async def request_upscale(self) -> UpscaleResult:
        """
        Run the upscale pipeline for the current image and mode.

        Failures never raise: they settle the session as failed and are
        returned as a failed UpscaleResult.

        Raises:
            RequestInFlightError: If a request is already running
        """
        self._ensure_not_in_flight()

        if self.source is None:
            result = UpscaleResult.failed(NO_IMAGE_SELECTED_MESSAGE, NoImageSelectedError.code)
            self._settle(result)
            return result

        source = self.source
        mode = self.mode

        self.status = SessionStatus.IN_FLIGHT
        self.result = None
        self.error = None
        self.error_code = None

        logger.info(
            "Upscale started",
            extra={"file_name": source.file_name, "mode": mode.value, "size": source.size}
        )

        try:
            if not self.api_key or not self.api_key.strip():
                raise MissingCredentialError()

            encoded = await self.encoder.encode_source(source)
            request = self.builder.build(encoded, source.media_type, mode)
            reply = await self.client.generate_content(request)
            result = self.interpreter.interpret(reply)

        except UpscalerError as e:
            logger.error(
                f"Upscale failed: {e}",
                extra={"error_code": e.code, "error": str(e)}
            )
            result = UpscaleResult.failed(f"An error occurred: {e}", e.code)

        except Exception as e:
            logger.error(
                f"Unexpected upscale failure: {e}",
                extra={"error": str(e), "type": type(e).__name__},
                exc_info=True
            )
            result = UpscaleResult.failed(UNKNOWN_ERROR_MESSAGE, UpscalerError.code)

        except asyncio.CancelledError:
            logger.warning(
                "Upscale cancelled",
                extra={"file_name": source.file_name, "mode": mode.value}
            )
            self._settle(UpscaleResult.failed(CANCELLED_MESSAGE, RequestCancelledError.code))
            raise

        else:
            if not result.ok:
                result = UpscaleResult.failed(f"An error occurred: {result.error}", result.error_code)

        self._settle(result)
        return result

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def download_name(self) -> str:
        name = self.source.file_name if self.source is not None else None
        return f"{DOWNLOAD_PREFIX}{name or 'image'}"

    def snapshot(self) -> SessionSnapshot:
        image = self.result.image if self.result is not None else None
        return SessionSnapshot(
            status=self.status,
            mode=self.mode,
            file_name=self.source.file_name if self.source else None,
            media_type=self.source.media_type if self.source else None,
            size=self.source.size if self.source else None,
            error=self.error,
            error_code=self.error_code,
            image_url=image.data_url if image else None,
            download_name=self.download_name() if image else None,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ensure_not_in_flight(self):
        if self.status == SessionStatus.IN_FLIGHT:
            raise RequestInFlightError("An upscale request is already in progress.")

    def _settle(self, result: UpscaleResult):
        if result.ok:
            self.status = SessionStatus.SUCCEEDED
            self.result = result
            self.error = None
            self.error_code = None
            logger.info(
                "Upscale succeeded",
                extra={"media_type": result.image.media_type, "mode": self.mode.value}
            )
        else:
            self.status = SessionStatus.FAILED
            self.result = None
            self.error = result.error
            self.error_code = result.error_code
