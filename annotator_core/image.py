# annotator_core/image.py
"""
Image input for the editors.

The editors only need the natural pixel size of an image; everything is
drawn on a canvas scaled down to fit a maximum width (never scaled up).
"""

import os

from PIL import Image, UnidentifiedImageError

from .config import get_config
from .exceptions import ImageLoadError
from .logger import get_logger

logger = get_logger(__name__)


def display_scale(natural_width, max_width):
    if natural_width <= 0:
        raise ValueError(f"image width must be positive, got {natural_width}")
    return min(max_width / natural_width, 1)


def canvas_size(natural_width, natural_height, max_width):
    scale = display_scale(natural_width, max_width)
    return round(natural_width * scale), round(natural_height * scale)


def fit_within(width, height, max_width, max_height):
    """Scale (width, height) down to fit both limits, keeping the aspect ratio."""
    if width <= 0 or height <= 0:
        raise ValueError(f"image size must be positive, got {width}x{height}")
    ratio = min(max_width / width, max_height / height, 1)
    return round(width * ratio), round(height * ratio)


class ImageInfo:
    def __init__(self, file_name, natural_width, natural_height, max_width=None, image=None):
        if natural_width <= 0 or natural_height <= 0:
            raise ValueError(f"image size must be positive, got {natural_width}x{natural_height}")
        self.file_name = file_name
        self.natural_width = natural_width
        self.natural_height = natural_height
        self.max_width = max_width if max_width is not None else get_config().max_width
        self.image = image
        self.scale = display_scale(natural_width, self.max_width)
        self.width, self.height = canvas_size(natural_width, natural_height, self.max_width)

    @property
    def size(self):
        return self.width, self.height

    def to_canvas(self, x, y):
        return x * self.scale, y * self.scale

    def to_natural(self, x, y):
        return x / self.scale, y / self.scale

    def __repr__(self):
        return (f"ImageInfo({self.file_name!r}, {self.natural_width}x{self.natural_height} "
                f"-> {self.width}x{self.height})")


def load_image(path, max_width=None):
    """Open an image with Pillow and describe it for a session."""
    try:
        image = Image.open(path)
        image.load()
    except (OSError, UnidentifiedImageError) as e:
        raise ImageLoadError(f"Cannot open image: {e}", path=str(path)) from e
    orig_width, orig_height = image.size
    info = ImageInfo(os.path.basename(str(path)), orig_width, orig_height, max_width, image)
    logger.info(f"Loaded {info}")
    return info
