"""API routes."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, UploadFile, File

from app.pipeline.errors import (
    BatchFailed,
    InvalidClipSpec,
    SourceNotFound,
    SourceUnavailable,
)
from app.services.clip_service import ClipService
from app.services.source_service import SourceService
from app.utils.ffmpeg import check_ffmpeg_available
from app.utils.ytdlp import check_ytdlp_available
from app.api.schemas import (
    UploadResponse,
    ImportUrlRequest,
    ImportUrlResponse,
    ProcessClipsRequest,
    ProcessClipsResponse,
    HealthResponse,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def get_source_service() -> SourceService:
    return SourceService()


def get_clip_service() -> ClipService:
    return ClipService()


# =============================================================================
# Health & System
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Check API health and dependencies."""
    ffmpeg_ok = check_ffmpeg_available()
    ytdlp_ok = check_ytdlp_available()

    all_ok = ffmpeg_ok and ytdlp_ok

    message = None
    if not all_ok:
        missing = []
        if not ffmpeg_ok:
            missing.append("ffmpeg")
        if not ytdlp_ok:
            missing.append("yt-dlp")
        message = f"Missing dependencies: {', '.join(missing)}. Install with: brew install ffmpeg yt-dlp"

    return HealthResponse(
        status="healthy" if all_ok else "degraded",
        ffmpeg_available=ffmpeg_ok,
        ytdlp_available=ytdlp_ok,
        message=message
    )


# =============================================================================
# Sources
# =============================================================================

@router.post("/upload", response_model=UploadResponse)
async def upload_video(
    video: Optional[UploadFile] = File(None),
    service: SourceService = Depends(get_source_service)
):
    """Upload a source video."""
    if video is None:
        raise HTTPException(status_code=400, detail="No file uploaded")
    return await service.save_upload(video)


@router.post("/import-url", response_model=ImportUrlResponse, response_model_exclude_none=True)
async def import_url(
    data: ImportUrlRequest,
    service: SourceService = Depends(get_source_service)
):
    """Import a source video by URL."""
    if not data.url:
        raise HTTPException(status_code=400, detail="URL is required")
    try:
        return await service.import_url(data.url)
    except SourceUnavailable as e:
        raise HTTPException(status_code=500, detail=str(e))


# =============================================================================
# Clip Processing
# =============================================================================

@router.post("/process-clips", response_model=ProcessClipsResponse)
async def process_clips(
    data: ProcessClipsRequest,
    service: ClipService = Depends(get_clip_service)
):
    """Render every requested clip, or fail the whole batch."""
    try:
        specs = [clip.to_spec() for clip in data.clips]
        clips = await service.process_clips(
            data.source_filename,
            specs,
            data.aspect_ratio,
            source_type=data.source_type,
        )
    except InvalidClipSpec as e:
        raise HTTPException(status_code=422, detail=str(e))
    except SourceNotFound:
        raise HTTPException(status_code=404, detail="Source file not found")
    except SourceUnavailable as e:
        raise HTTPException(status_code=502, detail=str(e))
    except BatchFailed as e:
        raise HTTPException(status_code=500, detail=f"Processing failed: {e.reason}")

    return {"clips": clips}
