"""Session endpoints: select an image, pick a mode, upscale, download."""

from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel

from ..core.orchestrator import UpscaleOrchestrator
from ..models.enums import EnhancementMode, RejectionReason
from ..models.schemas import SessionSnapshot, UpscaleResult
from ..utils.errors import EncodingError, RequestInFlightError
from ..utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()

REJECTION_STATUS = {
    RejectionReason.INVALID_TYPE: 415,
    RejectionReason.TOO_LARGE: 413,
}


class ModeUpdate(BaseModel):
    mode: EnhancementMode


def _orchestrator(request: Request) -> UpscaleOrchestrator:
    return request.app.state.orchestrator


@router.get("", response_model=SessionSnapshot)
async def get_session(request: Request):
    return _orchestrator(request).snapshot()


@router.post("/image", response_model=SessionSnapshot)
async def select_image(request: Request, file: UploadFile = File(...)):
    """Select the image to upscale. Rejected files keep the previous selection."""
    orchestrator = _orchestrator(request)

    try:
        content = await file.read()
    finally:
        await file.close()

    try:
        outcome = orchestrator.select_file(
            media_type=file.content_type or "",
            size=len(content),
            content=content,
            file_name=file.filename,
        )
    except RequestInFlightError as e:
        raise HTTPException(status_code=409, detail=str(e))

    if not outcome.accepted:
        raise HTTPException(status_code=REJECTION_STATUS[outcome.reason], detail=outcome.message)

    return orchestrator.snapshot()


@router.put("/mode", response_model=SessionSnapshot)
async def set_mode(request: Request, update: ModeUpdate):
    orchestrator = _orchestrator(request)
    try:
        orchestrator.set_mode(update.mode)
    except RequestInFlightError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return orchestrator.snapshot()


@router.post("/upscale", response_model=UpscaleResult)
async def upscale(request: Request):
    """Run the upscale. Failed results are returned with 200."""
    try:
        return await _orchestrator(request).request_upscale()
    except RequestInFlightError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/download")
async def download(request: Request):
    orchestrator = _orchestrator(request)
    result = orchestrator.result
    if result is None or not result.ok:
        raise HTTPException(status_code=404, detail="No upscaled image available")

    try:
        body = orchestrator.encoder.decode(result.image.data)
    except EncodingError as e:
        logger.error(f"Upscaled image could not be decoded: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return Response(
        content=body,
        media_type=result.image.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{orchestrator.download_name()}"',
        },
    )
