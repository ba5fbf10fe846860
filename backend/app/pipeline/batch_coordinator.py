"""Run a batch of clip renders concurrently."""
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from app.pipeline.errors import InvalidClipSpec
from app.pipeline.models import (
    AspectRatio,
    BatchOutcome,
    ClipSpec,
    RenderResult,
    ResolvedInput,
    clip_id_sort_key,
)
from app.pipeline.render_job import ClipRenderJob

logger = logging.getLogger(__name__)

RenderFn = Callable[[ResolvedInput, ClipSpec, AspectRatio], Awaitable[RenderResult]]


class ClipBatchCoordinator:
    """Fans clip specs out to concurrent render jobs.

    The batch is all-or-nothing: the first job to fail (by completion time)
    decides the reported reason, but every job is still awaited so no
    transcoder process outlives the batch.
    """

    def __init__(self, render: Optional[RenderFn] = None):
        self.render = render or ClipRenderJob().render

    async def run_batch(
        self,
        source: ResolvedInput,
        specs: List[ClipSpec],
        aspect: AspectRatio,
    ) -> BatchOutcome:
        """
        Render every clip spec against the same source.

        Args:
            source: Resolved transcoder input shared by all jobs
            specs: Clips to render; ids must be unique
            aspect: Target aspect ratio for every clip

        Returns:
            BatchOutcome with results ordered by clip id, or the first failure
        """
        ids = [spec.id for spec in specs]
        if len(set(ids)) != len(ids):
            raise InvalidClipSpec("Clip ids must be unique within a batch")
        if not specs:
            return BatchOutcome.all_succeeded([])

        mode = "STREAMING" if source.is_remote_stream else "LOCAL FILE"
        logger.info(f"Processing {len(specs)} clips via {mode}")

        tasks = [
            asyncio.create_task(self._render_one(source, spec, aspect), name=f"clip-{spec.id}")
            for spec in specs
        ]

        results: List[RenderResult] = []
        first_failure: Optional[RenderResult] = None
        try:
            # Single writer: results are collected here in completion order
            for next_done in asyncio.as_completed(tasks):
                result = await next_done
                if result.ok:
                    results.append(result)
                elif first_failure is None:
                    first_failure = result
                    logger.error(f"Batch failed on clip {result.clip_id}: {result.reason}")
                else:
                    logger.warning(f"Additional failure on clip {result.clip_id}: {result.reason}")
        finally:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        if first_failure is not None:
            return BatchOutcome.batch_failed(first_failure)

        results.sort(key=lambda r: clip_id_sort_key(r.clip_id))
        return BatchOutcome.all_succeeded(results)

    async def _render_one(self, source: ResolvedInput, spec: ClipSpec, aspect: AspectRatio) -> RenderResult:
        try:
            return await self.render(source, spec, aspect)
        except Exception as e:
            logger.exception(f"Unexpected error rendering clip {spec.id}")
            return RenderResult.failed(spec.id, f"Clip {spec.id} failed: {e}")
