"""Domain types for the clip rendering pipeline."""
import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from app.pipeline.errors import InvalidClipSpec


class AspectRatio(str, enum.Enum):
    """Target aspect ratio for rendered clips."""
    PORTRAIT_9_16 = "9:16"
    SQUARE_1_1 = "1:1"
    LANDSCAPE_16_9 = "16:9"


class SourceType(str, enum.Enum):
    """Source type as reported by the upload/import endpoints."""
    LOCAL = "local"
    URL = "url"
    YOUTUBE = "youtube"


class RenderStatus(str, enum.Enum):
    """Terminal state of a render job."""
    SUCCESS = "success"
    FAILED = "failed"


# =============================================================================
# Source descriptors
# =============================================================================

@dataclass(frozen=True)
class LocalFile:
    """An uploaded file on local disk."""
    path: str


@dataclass(frozen=True)
class DirectUrl:
    """A URL the transcoder can stream directly."""
    url: str


@dataclass(frozen=True)
class PlatformLink:
    """A video platform page that needs format negotiation."""
    url: str


SourceDescriptor = Union[LocalFile, DirectUrl, PlatformLink]


@dataclass(frozen=True)
class ResolvedInput:
    """A source the transcoder can open directly.

    ``audio_uri`` is only set when the platform offered no combined
    audio+video format and a separate audio stream must be mapped in.
    """
    uri: str
    is_remote_stream: bool
    audio_uri: Optional[str] = None


# =============================================================================
# Clips
# =============================================================================

@dataclass(frozen=True)
class ClipSpec:
    """A requested sub-range of the source video."""
    id: str
    start_time: float
    end_time: float
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        if self.start_time < 0:
            raise InvalidClipSpec(f"Clip {self.id}: start time must be >= 0")
        if self.end_time <= self.start_time:
            raise InvalidClipSpec(
                f"Clip {self.id}: end time ({self.end_time}) must be after "
                f"start time ({self.start_time})"
            )

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class RenderResult:
    """Outcome of rendering one clip."""
    clip_id: str
    status: RenderStatus
    output_locator: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, clip_id: str, output_locator: str) -> "RenderResult":
        return cls(clip_id=clip_id, status=RenderStatus.SUCCESS, output_locator=output_locator)

    @classmethod
    def failed(cls, clip_id: str, reason: str) -> "RenderResult":
        return cls(clip_id=clip_id, status=RenderStatus.FAILED, reason=reason)

    @property
    def ok(self) -> bool:
        return self.status == RenderStatus.SUCCESS


@dataclass(frozen=True)
class BatchOutcome:
    """Either every clip rendered (ordered by id) or the first failure."""
    results: List[RenderResult] = field(default_factory=list)
    failure: Optional[RenderResult] = None

    @classmethod
    def all_succeeded(cls, results: List[RenderResult]) -> "BatchOutcome":
        return cls(results=list(results))

    @classmethod
    def batch_failed(cls, first_failure: RenderResult) -> "BatchOutcome":
        return cls(failure=first_failure)

    @property
    def ok(self) -> bool:
        return self.failure is None


def clip_id_sort_key(clip_id: str):
    """Sort numeric ids by value, then any non-numeric ids by text."""
    if clip_id.isdecimal():
        return (0, int(clip_id), clip_id)
    return (1, 0, clip_id)
