"""
Shared test fixtures.
"""

from pathlib import Path

import pytest

from annotator_core.ids import SequentialIds, use_id_factory
from annotator_core.image import ImageInfo
from annotator_core.session import KeypointSession
from annotator_core.shapes import BoxSession, PolygonSession
from annotator_core.templates import MemoryStore, SkeletonLibrary


@pytest.fixture
def seq_ids():
    """Deterministic ids (id-1, id-2, ...) for the duration of a test."""
    with use_id_factory(SequentialIds()) as factory:
        yield factory


@pytest.fixture
def image_info() -> ImageInfo:
    """A 900x600 canvas (natural size already within the width limit)."""
    return ImageInfo("frame_001.jpg", 900, 600, max_width=900)


@pytest.fixture
def sample_image(tmp_path: Path) -> Path:
    """A 1800x1200 PNG written with Pillow."""
    from PIL import Image

    img = Image.new("RGB", (1800, 1200), color=(40, 40, 40))
    path = tmp_path / "sample.png"
    img.save(path)
    return path


@pytest.fixture
def keypoint_session(image_info) -> KeypointSession:
    session = KeypointSession()
    session.load_image(image_info)
    return session


@pytest.fixture
def polygon_session(image_info) -> PolygonSession:
    session = PolygonSession(close_threshold=10)
    session.load_image(image_info)
    return session


@pytest.fixture
def box_session(image_info) -> BoxSession:
    session = BoxSession(min_size=5)
    session.load_image(image_info)
    return session


@pytest.fixture
def library() -> SkeletonLibrary:
    return SkeletonLibrary(MemoryStore(), key="skeletons")
