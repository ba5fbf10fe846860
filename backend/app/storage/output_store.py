"""Output file allocation for rendered clips."""
import re
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from app.config import settings

GENERATED_PREFIX = "/generated"


@dataclass(frozen=True)
class OutputAllocation:
    """Where a clip is written and the URL it is served from."""
    path: Path
    locator: str


class OutputStore:
    """Allocates collision-free output files under a static-served directory."""

    def __init__(self, output_dir: Optional[Path] = None, base_url: Optional[str] = None):
        self.output_dir = Path(output_dir or settings.output_dir)
        self.base_url = (base_url if base_url is not None else settings.public_base_url).rstrip("/")

    def allocate(self, clip_id: str, extension: str = "mp4") -> OutputAllocation:
        """
        Allocate a new output file for a clip.

        Every call returns a distinct name (timestamp plus a random suffix),
        so re-rendering the same clip id never overwrites an earlier file.
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        safe_id = re.sub(r"[^A-Za-z0-9_-]", "_", str(clip_id)) or "clip"
        filename = f"clip-{safe_id}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}.{extension}"
        return OutputAllocation(
            path=self.output_dir / filename,
            locator=f"{self.base_url}{GENERATED_PREFIX}/{filename}",
        )

    def resolve(self, locator: str) -> Path:
        """
        Map a locator (or bare file name) back to its file.

        Raises:
            FileNotFoundError: If the locator is outside the store or missing
        """
        filename = locator.rsplit("/", 1)[-1]
        path = (self.output_dir / filename).resolve()
        if path.parent != self.output_dir.resolve() or not path.is_file():
            raise FileNotFoundError(f"No generated clip for {locator}")
        return path
