"""yt-dlp utilities for platform stream metadata."""
import asyncio
import json
import logging
import re
import shutil

from app.config import settings

logger = logging.getLogger(__name__)


class YtdlpError(Exception):
    """yt-dlp related error."""
    pass


def check_ytdlp_available() -> bool:
    """Check if yt-dlp is available."""
    return shutil.which(settings.ytdlp_path) is not None


def is_youtube_url(url: str) -> bool:
    """Check if a URL is a valid YouTube URL."""
    youtube_patterns = [
        r"^https?://(?:www\.|m\.)?youtube\.com/watch\?v=[\w-]+",
        r"^https?://(?:www\.)?youtube\.com/shorts/[\w-]+",
        r"^https?://youtu\.be/[\w-]+",
        r"^https?://(?:www\.)?youtube\.com/embed/[\w-]+",
    ]
    return any(re.match(pattern, url) for pattern in youtube_patterns)


async def get_video_info_ytdlp(url: str) -> dict:
    """
    Get video information, including the format list, without downloading.

    Args:
        url: YouTube URL

    Returns:
        Dictionary with video metadata

    Raises:
        YtdlpError: If yt-dlp cannot be run or reports a failure
    """
    cmd = [
        settings.ytdlp_path,
        "--dump-json",
        "--no-download",
        "--no-playlist",
        url
    ]
    logger.debug(f"Running yt-dlp: {' '.join(cmd)}")

    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )
    except OSError as e:
        raise YtdlpError(f"Could not start yt-dlp: {e}")

    stdout, stderr = await proc.communicate()

    if proc.returncode != 0:
        error_msg = stderr.decode(errors="ignore").strip()
        raise YtdlpError(f"Failed to get video info: {error_msg}")

    try:
        return json.loads(stdout.decode())
    except json.JSONDecodeError as e:
        raise YtdlpError(f"Failed to parse video info: {e}")


async def extract_video_title(url: str) -> str:
    """
    Extract video title from YouTube URL.

    Raises:
        YtdlpError: If the metadata cannot be fetched
    """
    info = await get_video_info_ytdlp(url)
    return info.get("title") or "Untitled Video"
