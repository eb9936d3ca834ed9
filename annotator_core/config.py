# annotator_core/config.py
"""
Configuration for annotator_core.

Defaults are read from the environment when the config is created.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class AnnotatorConfig:
    """Editor limits, template store location and log level."""

    # Canvas width limit for the keypoint and box editors
    max_width: int = field(default_factory=lambda: int(os.getenv("ANNOTATOR_MAX_WIDTH", "900")))
    # The polygon editor uses a wider canvas
    polygon_max_width: int = field(
        default_factory=lambda: int(os.getenv("ANNOTATOR_POLYGON_MAX_WIDTH", "1000"))
    )

    close_threshold: float = field(
        default_factory=lambda: float(os.getenv("ANNOTATOR_CLOSE_THRESHOLD", "10"))
    )
    min_box_size: float = field(default_factory=lambda: float(os.getenv("ANNOTATOR_MIN_BOX_SIZE", "5")))

    store_path: Path = field(default_factory=lambda: Path(os.getenv(
        "ANNOTATOR_STORE_PATH",
        str(Path.home() / ".annotator_core" / "store.json"),
    )))
    template_key: str = field(default_factory=lambda: os.getenv("ANNOTATOR_TEMPLATE_KEY", "skeletons"))

    log_level: str = field(default_factory=lambda: os.getenv("ANNOTATOR_LOG_LEVEL", "INFO"))

    def __post_init__(self):
        if isinstance(self.store_path, str):
            self.store_path = Path(self.store_path)

    def to_dict(self) -> dict:
        """Convert to dictionary for display/debugging."""
        return {
            "max_width": self.max_width,
            "polygon_max_width": self.polygon_max_width,
            "close_threshold": self.close_threshold,
            "min_box_size": self.min_box_size,
            "store_path": str(self.store_path),
            "template_key": self.template_key,
            "log_level": self.log_level,
        }


_config: Optional[AnnotatorConfig] = None


def get_config() -> AnnotatorConfig:
    """Get the global configuration instance, creating it on first use."""
    global _config
    if _config is None:
        _config = AnnotatorConfig()
    return _config


def reload_config() -> AnnotatorConfig:
    """Rebuild the global configuration from the current environment."""
    global _config
    _config = AnnotatorConfig()
    return _config
