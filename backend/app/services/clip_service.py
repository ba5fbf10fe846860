"""Clip processing service layer."""
import logging
from typing import List, Optional

from app.pipeline.batch_coordinator import ClipBatchCoordinator
from app.pipeline.errors import BatchFailed
from app.pipeline.models import AspectRatio, ClipSpec
from app.pipeline.source_resolver import SourceResolver, parse_source_descriptor

logger = logging.getLogger(__name__)

# Set from the render result, never copied from the request
_OUTPUT_KEYS = {"video_url", "videoUrl"}


class ClipService:
    """Resolves a source and renders a batch of clips from it."""

    def __init__(
        self,
        resolver: Optional[SourceResolver] = None,
        coordinator: Optional[ClipBatchCoordinator] = None,
    ):
        self.resolver = resolver or SourceResolver()
        self.coordinator = coordinator or ClipBatchCoordinator()

    async def process_clips(
        self,
        source: str,
        clips: List[ClipSpec],
        aspect_ratio: AspectRatio,
        source_type: Optional[str] = None,
    ) -> List[dict]:
        """
        Render every requested clip.

        Args:
            source: Uploaded filename or source URL
            clips: Requested clip ranges
            aspect_ratio: Target aspect ratio
            source_type: "local", "url" or "youtube", inferred when omitted

        Returns:
            One dict per clip (request fields plus ``video_url``), ordered by id

        Raises:
            SourceNotFound: If the uploaded file is missing
            SourceUnavailable: If a platform link cannot be resolved
            BatchFailed: If any clip fails to render
        """
        descriptor = parse_source_descriptor(source, source_type)
        # Source errors abort here, before any render starts
        resolved = await self.resolver.resolve(descriptor)

        outcome = await self.coordinator.run_batch(resolved, clips, aspect_ratio)
        if not outcome.ok:
            failure = outcome.failure
            raise BatchFailed(failure.reason or f"Clip {failure.clip_id} failed", failure.clip_id)

        by_id = {clip.id: clip for clip in clips}
        processed = []
        for result in outcome.results:
            clip = by_id[result.clip_id]
            extra = {k: v for k, v in clip.extra.items() if k not in _OUTPUT_KEYS}
            processed.append({
                **extra,
                "id": clip.id,
                "start_time": clip.start_time,
                "end_time": clip.end_time,
                "video_url": result.output_locator,
            })

        logger.info(f"Rendered {len(processed)} clips from {source}")
        return processed
