"""FFmpeg utilities."""
import asyncio
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from app.config import settings

logger = logging.getLogger(__name__)


class FFmpegError(Exception):
    """FFmpeg related error."""
    pass


@dataclass
class ProcessResult:
    """Exit status and captured stderr of an ffmpeg run."""
    returncode: int
    stderr: str


def check_ffmpeg_available() -> bool:
    """Check if ffmpeg is available."""
    return shutil.which(settings.ffmpeg_path) is not None


def format_seconds(value: float) -> str:
    """Format a time value for the command line without losing precision."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def build_clip_command(
    input_uri: str,
    output_path: str | Path,
    start_time: float,
    duration: float,
    video_filter: Optional[str] = None,
    remote_stream: bool = False,
    audio_uri: Optional[str] = None,
) -> List[str]:
    """
    Build the ffmpeg command for a fast trim+crop+encode.

    The seek is placed before each input, so ffmpeg jumps to the nearest
    keyframe instead of decoding from the start.

    Args:
        input_uri: Local path or direct media URL
        output_path: Path for output file
        start_time: Seek position in seconds
        duration: Output duration in seconds
        video_filter: Optional -vf filter expression
        remote_stream: Skip probing heuristics to start streaming sooner
        audio_uri: Separate audio stream to map in (video-only input)

    Returns:
        Argument list for asyncio.create_subprocess_exec
    """
    input_options = ["-ss", format_seconds(start_time)]
    if remote_stream:
        input_options += [
            "-analyzeduration", str(settings.stream_analyzeduration),
            "-probesize", str(settings.stream_probesize),
        ]

    cmd = [settings.ffmpeg_path, "-y", *input_options, "-i", str(input_uri)]
    if audio_uri:
        cmd += [*input_options, "-i", str(audio_uri), "-map", "0:v:0", "-map", "1:a:0"]

    cmd += ["-t", format_seconds(duration)]
    if video_filter:
        cmd += ["-vf", video_filter]

    # No +faststart: it forces a second pass over the file
    cmd += [
        "-c:v", settings.render_video_codec,
        "-preset", settings.render_video_preset,
        "-crf", str(settings.render_video_crf),
        "-c:a", settings.render_audio_codec,
        "-b:a", settings.render_audio_bitrate,
        "-ac", str(settings.render_audio_channels),
        "-pix_fmt", settings.render_pixel_format,
        str(output_path),
    ]
    return cmd


async def run_ffmpeg(cmd: List[str]) -> ProcessResult:
    """
    Run an ffmpeg command to completion.

    If the awaiting task is cancelled, the ffmpeg process is killed and
    reaped before the cancellation propagates.

    Raises:
        FFmpegError: If the ffmpeg binary cannot be started
    """
    logger.debug(f"Running ffmpeg: {' '.join(cmd)}")
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE
        )
    except OSError as e:
        raise FFmpegError(f"Could not start ffmpeg: {e}")

    try:
        _, stderr = await proc.communicate()
    except asyncio.CancelledError:
        if proc.returncode is None:
            proc.kill()
            await proc.wait()
        raise

    return ProcessResult(
        returncode=proc.returncode,
        stderr=stderr.decode("utf-8", errors="ignore")
    )


def summarize_stderr(stderr: str, max_lines: int = 3) -> str:
    """Keep the last few meaningful lines of ffmpeg's stderr."""
    lines = [line.strip() for line in stderr.splitlines() if line.strip()]
    if not lines:
        return "ffmpeg exited with an error"
    return " | ".join(lines[-max_lines:])
