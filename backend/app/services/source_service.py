"""Source upload and import service layer."""
import logging
import uuid
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from app.config import settings
from app.pipeline.errors import SourceUnavailable
from app.pipeline.models import SourceType
from app.utils.ytdlp import YtdlpError, extract_video_title, is_youtube_url

logger = logging.getLogger(__name__)


class SourceService:
    """Service for getting source videos into the pipeline."""

    def __init__(self, upload_dir: Optional[Path] = None):
        self.upload_dir = Path(upload_dir or settings.upload_dir)

    async def save_upload(self, file: UploadFile) -> dict:
        """
        Store an uploaded video under a unique name.

        Returns:
            Upload response with the stored filename and path
        """
        original_name = Path(file.filename or "video.mp4").name
        filename = f"{uuid.uuid4()}-{original_name}"
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        target = self.upload_dir / filename

        with open(target, "wb") as f:
            content = await file.read()
            f.write(content)

        logger.info(f"Stored upload {original_name} as {filename}")
        return {
            "message": "File uploaded successfully",
            "filename": filename,
            "path": str(target),
            "type": SourceType.LOCAL.value,
        }

    async def import_url(self, url: str) -> dict:
        """
        Register a remote video URL.

        Platform links are checked by fetching their title; any other URL
        is accepted as-is and streamed by the transcoder later.

        Raises:
            SourceUnavailable: If platform metadata cannot be fetched
        """
        if not is_youtube_url(url):
            return {"filename": url, "path": url, "type": SourceType.URL.value}

        try:
            title = await extract_video_title(url)
        except YtdlpError as e:
            logger.error(f"Import Error: {e}")
            raise SourceUnavailable("Failed to access video URL") from e

        return {
            "filename": url,
            "path": url,
            "type": SourceType.YOUTUBE.value,
            "metadata": {"title": title},
        }
