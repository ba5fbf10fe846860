"""Render a single clip: seek, trim, crop, encode."""
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from app.pipeline.crop_policy import crop_filter
from app.pipeline.errors import RenderFailed
from app.pipeline.models import AspectRatio, ClipSpec, RenderResult, ResolvedInput
from app.storage.output_store import OutputStore
from app.utils.ffmpeg import (
    FFmpegError,
    ProcessResult,
    build_clip_command,
    run_ffmpeg,
    summarize_stderr,
)

logger = logging.getLogger(__name__)

CommandRunner = Callable[[List[str]], Awaitable[ProcessResult]]


class ClipRenderJob:
    """Renders one clip with the fast preview encode profile.

    Failures are reported in the returned RenderResult rather than raised,
    and are never retried here.
    """

    def __init__(
        self,
        store: Optional[OutputStore] = None,
        runner: Optional[CommandRunner] = None,
    ):
        self.store = store or OutputStore()
        self.runner = runner or run_ffmpeg

    def build_command(self, source: ResolvedInput, spec: ClipSpec, aspect: AspectRatio, output_path) -> List[str]:
        """Build the transcoder invocation for a clip."""
        crop = crop_filter(aspect)
        return build_clip_command(
            input_uri=source.uri,
            output_path=output_path,
            start_time=spec.start_time,
            duration=spec.duration,
            video_filter=crop.to_ffmpeg() if crop else None,
            remote_stream=source.is_remote_stream,
            audio_uri=source.audio_uri,
        )

    async def render(self, source: ResolvedInput, spec: ClipSpec, aspect: AspectRatio) -> RenderResult:
        """
        Render a clip to a newly allocated output file.

        Args:
            source: Resolved transcoder input
            spec: Clip time range
            aspect: Target aspect ratio

        Returns:
            RenderResult with the output locator, or the failure reason
        """
        allocation = self.store.allocate(spec.id)
        cmd = self.build_command(source, spec, aspect, allocation.path)

        try:
            await self._run(spec, cmd)
        except RenderFailed as e:
            logger.error(str(e))
            allocation.path.unlink(missing_ok=True)
            return RenderResult.failed(spec.id, str(e))
        except asyncio.CancelledError:
            logger.warning(f"Clip {spec.id} cancelled")
            allocation.path.unlink(missing_ok=True)
            raise
        except Exception:
            allocation.path.unlink(missing_ok=True)
            raise

        logger.info(f"Clip {spec.id} generated.")
        return RenderResult.success(spec.id, allocation.locator)

    async def _run(self, spec: ClipSpec, cmd: List[str]) -> None:
        try:
            result = await self.runner(cmd)
        except FFmpegError as e:
            raise RenderFailed(spec.id, str(e)) from e

        if result.returncode != 0:
            raise RenderFailed(spec.id, summarize_stderr(result.stderr))
