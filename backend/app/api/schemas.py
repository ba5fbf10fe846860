"""Pydantic schemas for API requests and responses."""
from typing import Optional, List, Dict, Union
from pydantic import BaseModel, Field

from app.pipeline.models import AspectRatio, ClipSpec, SourceType


# =============================================================================
# Source Schemas
# =============================================================================

class UploadResponse(BaseModel):
    """Response for an uploaded source video."""
    message: str
    filename: str
    path: str
    type: SourceType


class ImportUrlRequest(BaseModel):
    """Request to import a video by URL."""
    url: Optional[str] = Field(None, description="Direct media URL or YouTube link")


class ImportUrlResponse(BaseModel):
    """Response for an imported URL."""
    filename: str
    path: str
    type: SourceType
    metadata: Optional[Dict[str, str]] = None


# =============================================================================
# Clip Schemas
# =============================================================================

class ClipRequest(BaseModel):
    """A clip to render. Extra fields (title, summary, ...) are echoed back."""
    id: Union[str, int]
    start_time: float = Field(..., ge=0, alias="startTime")
    end_time: float = Field(..., gt=0, alias="endTime")

    class Config:
        populate_by_name = True
        extra = "allow"

    def to_spec(self) -> ClipSpec:
        return ClipSpec(
            id=str(self.id),
            start_time=self.start_time,
            end_time=self.end_time,
            extra=dict(self.model_extra or {}),
        )


class ProcessClipsRequest(BaseModel):
    """Request to render a batch of clips from one source."""
    source_filename: str = Field(..., alias="sourceFilename", description="Uploaded filename or source URL")
    source_type: Optional[SourceType] = Field(None, alias="sourceType")
    clips: List[ClipRequest]
    aspect_ratio: AspectRatio = Field(AspectRatio.PORTRAIT_9_16, alias="aspectRatio")

    class Config:
        populate_by_name = True


class ProcessedClip(BaseModel):
    """A rendered clip."""
    id: str
    start_time: float = Field(..., alias="startTime")
    end_time: float = Field(..., alias="endTime")
    video_url: str = Field(..., alias="videoUrl")

    class Config:
        populate_by_name = True
        extra = "allow"


class ProcessClipsResponse(BaseModel):
    """Rendered clips ordered by id."""
    clips: List[ProcessedClip]


# =============================================================================
# Health Check
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    ffmpeg_available: bool
    ytdlp_available: bool
    message: Optional[str] = None
