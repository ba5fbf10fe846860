"""Tests for aspect-ratio crop geometry."""
import pytest
from app.pipeline.crop_policy import CropFilter, crop_filter
from app.pipeline.models import AspectRatio


class TestCropFilter:
    """Tests for crop_filter()."""

    def test_portrait_width_is_nine_sixteenths_of_height(self):
        crop = crop_filter(AspectRatio.PORTRAIT_9_16)
        width, height, x, y = crop.evaluate(1920, 1080)
        assert height == 1080
        assert width == pytest.approx(1080 * 9 / 16)
        assert y == 0

    def test_portrait_is_horizontally_centered(self):
        crop = crop_filter(AspectRatio.PORTRAIT_9_16)
        width, _, x, _ = crop.evaluate(1280, 720)
        left_margin = x
        right_margin = 1280 - (x + width)
        assert left_margin == pytest.approx(right_margin)

    def test_portrait_ffmpeg_expression(self):
        crop = crop_filter(AspectRatio.PORTRAIT_9_16)
        assert crop.to_ffmpeg() == "crop=ih*9/16:ih:(iw-ow)/2:0"

    def test_square_uses_full_height(self):
        crop = crop_filter(AspectRatio.SQUARE_1_1)
        width, height, x, _ = crop.evaluate(1920, 1080)
        assert width == height == 1080
        assert x == 420
        assert crop.to_ffmpeg() == "crop=ih:ih:(iw-ow)/2:0"

    def test_landscape_is_identity(self):
        assert crop_filter(AspectRatio.LANDSCAPE_16_9) is None

    def test_accepts_raw_value(self):
        crop = crop_filter("9:16")
        assert isinstance(crop, CropFilter)

    def test_unknown_ratio_rejected(self):
        with pytest.raises(ValueError):
            crop_filter("4:3")
