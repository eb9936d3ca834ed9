"""
Tests for image sizing and loading.
"""

import pytest

from annotator_core.exceptions import ImageLoadError
from annotator_core.image import ImageInfo, canvas_size, display_scale, fit_within, load_image
from annotator_core.session import KeypointSession
from annotator_core.shapes import BoxSession, PolygonSession


class TestScaling:
    def test_downscales_wide_images(self):
        assert display_scale(1800, 900) == 0.5

    def test_never_upscales(self):
        assert display_scale(300, 900) == 1

    def test_canvas_size_rounds(self):
        assert canvas_size(1800, 1201, 900) == (900, 600)
        assert canvas_size(1800, 1203, 900) == (900, 602)

    def test_fit_within(self):
        assert fit_within(2000, 1000, 1000, 300) == (600, 300)
        assert fit_within(100, 50, 1000, 1000) == (100, 50)

    @pytest.mark.parametrize("width", [0, -10])
    def test_non_positive_width(self, width):
        with pytest.raises(ValueError):
            display_scale(width, 900)


class TestImageInfo:
    def test_canvas_mapping(self):
        info = ImageInfo("a.jpg", 1800, 1200, max_width=900)
        assert info.size == (900, 600)
        assert info.to_canvas(200, 100) == (100, 50)
        assert info.to_natural(100, 50) == (200, 100)

    def test_rejects_empty_image(self):
        with pytest.raises(ValueError):
            ImageInfo("a.jpg", 100, 0, max_width=900)


class TestLoadImage:
    def test_reads_size_with_pillow(self, sample_image):
        info = load_image(sample_image, max_width=900)
        assert info.file_name == "sample.png"
        assert (info.natural_width, info.natural_height) == (1800, 1200)
        assert info.scale == 0.5
        assert info.size == (900, 600)
        assert info.image is not None

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "broken.png"
        path.write_text("not an image")
        with pytest.raises(ImageLoadError) as exc_info:
            load_image(path)
        assert exc_info.value.path == str(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImageLoadError):
            load_image(tmp_path / "missing.png")


class TestOpenImage:
    def test_keypoint_and_box_editors_use_max_width(self, sample_image):
        assert KeypointSession().open_image(sample_image).size == (900, 600)
        session = BoxSession(min_size=5)
        session.open_image(sample_image)
        assert (session.width, session.height) == (900, 600)

    def test_polygon_editor_uses_wider_canvas(self, sample_image):
        session = PolygonSession(close_threshold=10)
        session.open_image(sample_image)
        assert (session.width, session.height) == (1000, 667)
        assert session.file_name == "sample.png"
