"""Crop geometry for each target aspect ratio.

Geometry is kept symbolic (``iw``/``ih`` are the input width and height
at render time) because source resolution varies per video.
"""
from dataclasses import dataclass
from fractions import Fraction
from typing import Optional, Tuple

from app.pipeline.models import AspectRatio


@dataclass(frozen=True)
class CropFilter:
    """A centered full-height crop of ``ratio`` width per unit of height."""
    ratio: Fraction

    @property
    def width_expr(self) -> str:
        if self.ratio == 1:
            return "ih"
        return f"ih*{self.ratio.numerator}/{self.ratio.denominator}"

    @property
    def height_expr(self) -> str:
        return "ih"

    @property
    def x_expr(self) -> str:
        return "(iw-ow)/2"

    @property
    def y_expr(self) -> str:
        return "0"

    def to_ffmpeg(self) -> str:
        """Render as an ffmpeg ``crop`` filter."""
        return f"crop={self.width_expr}:{self.height_expr}:{self.x_expr}:{self.y_expr}"

    def evaluate(self, input_width: int, input_height: int) -> Tuple[float, float, float, float]:
        """Concrete (width, height, x, y) for a frame of the given size."""
        width = float(input_height * self.ratio)
        height = float(input_height)
        x = (input_width - width) / 2
        return width, height, x, 0.0


_CROP_RATIOS = {
    AspectRatio.PORTRAIT_9_16: Fraction(9, 16),
    AspectRatio.SQUARE_1_1: Fraction(1, 1),
}


def crop_filter(aspect: AspectRatio) -> Optional[CropFilter]:
    """
    Get the crop filter for a target aspect ratio.

    Landscape sources are assumed to already be widescreen, so 16:9
    returns None (no crop).
    """
    ratio = _CROP_RATIOS.get(AspectRatio(aspect))
    if ratio is None:
        return None
    return CropFilter(ratio=ratio)
