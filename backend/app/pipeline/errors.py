"""Clip pipeline errors."""
from typing import Optional


class PipelineError(Exception):
    """Base class for clip pipeline errors."""
    pass


class SourceNotFound(PipelineError):
    """A local source file does not exist."""
    pass


class SourceUnavailable(PipelineError):
    """A remote source could not be resolved to a playable stream."""
    pass


class InvalidClipSpec(PipelineError, ValueError):
    """A clip specification has an invalid time range or duplicate id."""
    pass


class RenderFailed(PipelineError):
    """The transcoder failed to render a single clip."""

    def __init__(self, clip_id: str, reason: str):
        super().__init__(f"Clip {clip_id} failed: {reason}")
        self.clip_id = clip_id
        self.reason = reason


class BatchFailed(PipelineError):
    """At least one clip in a batch failed; carries the first failure."""

    def __init__(self, reason: str, clip_id: Optional[str] = None):
        super().__init__(reason)
        self.reason = reason
        self.clip_id = clip_id
