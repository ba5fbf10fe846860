#!/usr/bin/env python3
"""
CLI tool to render a batch of clips from a local file or URL.

Usage:
    python scripts/render_clips_cli.py <source> --clip ID:START:END [--clip ...] [--aspect 9:16]

Example:
    python scripts/render_clips_cli.py ~/Videos/talk.mp4 --clip 1:0:15 --clip 2:15:25 -o ./clips
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.pipeline.batch_coordinator import ClipBatchCoordinator
from app.pipeline.errors import PipelineError
from app.pipeline.models import AspectRatio, ClipSpec, LocalFile
from app.pipeline.render_job import ClipRenderJob
from app.pipeline.source_resolver import SourceResolver, parse_source_descriptor
from app.storage.output_store import OutputStore


logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s'
)
logger = logging.getLogger(__name__)


def parse_clip(value: str) -> ClipSpec:
    """Parse ID:START:END into a ClipSpec."""
    try:
        clip_id, start, end = value.split(":")
        return ClipSpec(id=clip_id, start_time=float(start), end_time=float(end))
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid clip '{value}': {e}")


async def render_clips(
    source: str,
    clips: list[ClipSpec],
    aspect: AspectRatio,
    output_dir: Path,
) -> int:
    """
    Render clips and write a summary JSON next to them.

    Returns:
        Process exit code
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    if source.startswith("http"):
        resolver = SourceResolver()
        descriptor = parse_source_descriptor(source)
    else:
        source_path = Path(source).expanduser().resolve()
        resolver = SourceResolver(upload_dir=source_path.parent)
        descriptor = LocalFile(path=source_path.name)

    resolved = await resolver.resolve(descriptor)

    store = OutputStore(output_dir=output_dir, base_url="")
    coordinator = ClipBatchCoordinator(render=ClipRenderJob(store=store).render)
    outcome = await coordinator.run_batch(resolved, clips, aspect)

    summary_file = output_dir / "clips.json"
    with open(summary_file, 'w') as f:
        json.dump({
            "source": source,
            "aspect_ratio": aspect.value,
            "ok": outcome.ok,
            "error": outcome.failure.reason if outcome.failure else None,
            "clips": [
                {"id": r.clip_id, "output": str(store.resolve(r.output_locator))}
                for r in outcome.results
            ],
        }, f, indent=2)
    logger.info(f"Summary written to: {summary_file}")

    if not outcome.ok:
        logger.error(f"Batch failed: {outcome.failure.reason}")
        return 1

    for result in outcome.results:
        logger.info(f"  {result.clip_id}: {store.resolve(result.output_locator)}")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Render short clips from a long video",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Vertical clips from a local file
    python scripts/render_clips_cli.py talk.mp4 --clip 1:0:15 --clip 2:15:25

    # Square clips straight from YouTube
    python scripts/render_clips_cli.py https://youtu.be/VIDEO --clip 1:30:45 --aspect 1:1
        """
    )

    parser.add_argument(
        "source",
        help="Local video path or URL"
    )

    parser.add_argument(
        "--clip", "-c",
        dest="clips",
        type=parse_clip,
        action="append",
        required=True,
        help="Clip as ID:START:END in seconds (repeatable)"
    )

    parser.add_argument(
        "--aspect", "-a",
        type=AspectRatio,
        metavar="{9:16,1:1,16:9}",
        default=AspectRatio.PORTRAIT_9_16,
        help="Target aspect ratio"
    )

    parser.add_argument(
        "--output-dir", "-o",
        type=Path,
        default=Path("./viralcut_output"),
        help="Output directory for rendered clips (default: ./viralcut_output)"
    )

    args = parser.parse_args()

    try:
        exit_code = asyncio.run(render_clips(
            source=args.source,
            clips=args.clips,
            aspect=args.aspect,
            output_dir=args.output_dir,
        ))
    except PipelineError as e:
        logger.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(130)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
