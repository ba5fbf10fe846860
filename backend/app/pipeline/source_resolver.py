"""Turn a source descriptor into something the transcoder can open."""
import logging
from pathlib import Path
from typing import Awaitable, Callable, List, Optional

from app.config import settings
from app.pipeline.errors import SourceNotFound, SourceUnavailable
from app.pipeline.models import (
    DirectUrl,
    LocalFile,
    PlatformLink,
    ResolvedInput,
    SourceDescriptor,
    SourceType,
)
from app.utils.ytdlp import YtdlpError, get_video_info_ytdlp, is_youtube_url

logger = logging.getLogger(__name__)

MetadataFetcher = Callable[[str], Awaitable[dict]]
FormatStrategy = Callable[[List[dict]], Optional[ResolvedInput]]


def parse_source_descriptor(source: str, source_type: Optional[str] = None) -> SourceDescriptor:
    """
    Build a descriptor from an upload/import response.

    Without an explicit type, anything starting with ``http`` is a URL, and
    URLs on a known platform need format negotiation.
    """
    if source_type:
        source_type = SourceType(source_type)
        if source_type == SourceType.LOCAL:
            return LocalFile(path=source)
        if source_type == SourceType.YOUTUBE:
            return PlatformLink(url=source)
        return DirectUrl(url=source)

    if source.startswith("http"):
        if is_youtube_url(source):
            return PlatformLink(url=source)
        return DirectUrl(url=source)
    return LocalFile(path=source)


# =============================================================================
# Format selection
# =============================================================================

def _has_video(fmt: dict) -> bool:
    return fmt.get("vcodec") not in (None, "none")


def _has_audio(fmt: dict) -> bool:
    return fmt.get("acodec") not in (None, "none")


def _playable(formats: List[dict]) -> List[dict]:
    return [f for f in formats if f.get("url")]


def preferred_format(format_id: str) -> FormatStrategy:
    """Pick a specific format id, as long as it carries audio and video."""
    def strategy(formats: List[dict]) -> Optional[ResolvedInput]:
        for fmt in _playable(formats):
            if str(fmt.get("format_id")) == format_id and _has_video(fmt) and _has_audio(fmt):
                return ResolvedInput(uri=fmt["url"], is_remote_stream=True)
        return None
    strategy.__name__ = f"preferred_format[{format_id}]"
    return strategy


def lowest_combined_format(formats: List[dict]) -> Optional[ResolvedInput]:
    """Pick the lowest-resolution format carrying both audio and video."""
    combined = [f for f in _playable(formats) if _has_video(f) and _has_audio(f)]
    if not combined:
        return None
    # Formats without a reported height sort after every sized one
    best = min(combined, key=lambda f: (f.get("height") or float("inf"), f.get("tbr") or 0))
    return ResolvedInput(uri=best["url"], is_remote_stream=True)


def first_video_audio_pair(formats: List[dict]) -> Optional[ResolvedInput]:
    """Pair the first video-only format with the first audio-only format."""
    playable = _playable(formats)
    video = next((f for f in playable if _has_video(f) and not _has_audio(f)), None)
    audio = next((f for f in playable if _has_audio(f) and not _has_video(f)), None)
    if video is None or audio is None:
        return None
    return ResolvedInput(uri=video["url"], is_remote_stream=True, audio_uri=audio["url"])


def default_strategies() -> List[FormatStrategy]:
    return [
        preferred_format(settings.preferred_format_id),
        lowest_combined_format,
        first_video_audio_pair,
    ]


# =============================================================================
# Resolver
# =============================================================================

class SourceResolver:
    """Resolves descriptors to a single transcoder input.

    Platform links go through a fixed list of format strategies, each
    tried once against a single metadata fetch.
    """

    def __init__(
        self,
        upload_dir: Optional[Path] = None,
        fetch_metadata: Optional[MetadataFetcher] = None,
        strategies: Optional[List[FormatStrategy]] = None,
    ):
        self.upload_dir = Path(upload_dir or settings.upload_dir)
        self.fetch_metadata = fetch_metadata or get_video_info_ytdlp
        self.strategies = strategies if strategies is not None else default_strategies()

    async def resolve(self, descriptor: SourceDescriptor) -> ResolvedInput:
        """
        Resolve a descriptor.

        Raises:
            SourceNotFound: If a local file does not exist
            SourceUnavailable: If a platform link has no usable stream
        """
        if isinstance(descriptor, LocalFile):
            return self._resolve_local(descriptor)
        if isinstance(descriptor, DirectUrl):
            return ResolvedInput(uri=descriptor.url, is_remote_stream=True)
        if isinstance(descriptor, PlatformLink):
            return await self._resolve_platform(descriptor)
        raise TypeError(f"Unsupported source descriptor: {descriptor!r}")

    def _resolve_local(self, descriptor: LocalFile) -> ResolvedInput:
        # Only files inside the upload directory can be processed
        upload_root = self.upload_dir.resolve()
        path = (upload_root / descriptor.path).resolve()
        if upload_root not in path.parents or not path.is_file():
            raise SourceNotFound(f"Source file not found: {descriptor.path}")
        return ResolvedInput(uri=str(path), is_remote_stream=False)

    async def _resolve_platform(self, descriptor: PlatformLink) -> ResolvedInput:
        try:
            info = await self.fetch_metadata(descriptor.url)
        except YtdlpError as e:
            logger.error(f"Metadata fetch failed for {descriptor.url}: {e}")
            raise SourceUnavailable(f"Failed to access video URL: {descriptor.url}") from e

        formats = info.get("formats") or []
        for strategy in self.strategies:
            resolved = strategy(formats)
            if resolved is not None:
                name = getattr(strategy, "__name__", "strategy")
                logger.info(f"Resolved direct stream URL via {name}")
                return resolved

        raise SourceUnavailable(f"No playable audio/video format for {descriptor.url}")
