# annotator_core/import_tools.py
"""
Readers for YOLO pose and segmentation text.

Coordinates are denormalized with the canvas size given at read time, which
may differ from the size the file was written with. Lines that do not parse
are skipped, so a file without any valid line reads as no objects.
"""

import math

from .geometry import Bounds, denormalize
from .logger import get_logger
from .models import VISIBILITY_STATES, Connection, Keypoint, Polygon, keypoint_label

logger = get_logger(__name__)


class YoloObject:
    """One decoded YOLO pose record in canvas pixels."""

    def __init__(self, class_index, box, points):
        self.class_index = class_index
        # (cx, cy, bw, bh)
        self.box = box
        # [(x, y, v), ...]
        self.points = points

    @property
    def bounds(self):
        cx, cy, bw, bh = self.box
        return Bounds(cx - bw / 2, cy - bh / 2, cx + bw / 2, cy + bh / 2)

    def to_keypoints(self, names=None):
        """
        Keypoint entities with fresh ids in record order. A point takes its
        name from `names` (the meta file list) when one is given for its
        index, otherwise A, B, ...
        """
        names = names if isinstance(names, list) else []
        keypoints = []
        for i, (x, y, v) in enumerate(self.points):
            name = names[i] if i < len(names) else None
            if not isinstance(name, str) or not name:
                name = keypoint_label(i)
            keypoints.append(Keypoint(x, y, name, int(v)))
        return keypoints

    def __repr__(self):
        return f"YoloObject(class_index={self.class_index}, box={self.box}, points={len(self.points)})"


def _parse_numbers(line):
    try:
        values = [float(token) for token in line.split()]
    except ValueError:
        return None
    if not all(math.isfinite(v) for v in values):
        return None
    return values


def decode_yolo_line(line, width, height):
    """Decode one `cls cx cy bw bh [x y v]*` record; None if it is not one."""
    values = _parse_numbers(line)
    if values is None or len(values) < 5:
        if line.strip():
            logger.debug(f"Skipping malformed YOLO line: {line.strip()[:60]!r}")
        return None
    cx, cy, bw, bh = values[1:5]
    box = (denormalize(cx, width), denormalize(cy, height),
           denormalize(bw, width), denormalize(bh, height))
    rest = values[5:]
    triples = [rest[i:i + 3] for i in range(0, len(rest) - 2, 3)]
    if any(v not in VISIBILITY_STATES for _, _, v in triples):
        logger.debug(f"Skipping YOLO line with a bad visibility flag: {line.strip()[:60]!r}")
        return None
    points = [(denormalize(x, width), denormalize(y, height), int(v)) for x, y, v in triples]
    return YoloObject(int(values[0]), box, points)


def decode_yolo_text(text, width, height):
    objects = []
    for line in text.splitlines():
        obj = decode_yolo_line(line, width, height)
        if obj is not None:
            objects.append(obj)
    return objects


def read_yolo_file(path, width, height):
    with open(path) as f:
        objects = decode_yolo_text(f.read(), width, height)
    logger.info(f"Read {len(objects)} objects from {path}")
    return objects


def connections_from_meta(meta, keypoints):
    """
    Rebuild connections from a skeleton meta dict ({"skeleton": [[i, j], ...]})
    against keypoints in record order. Out of range, self and repeated pairs
    are ignored.
    """
    connections = []
    for pair in meta.get("skeleton", []) if isinstance(meta, dict) else []:
        try:
            i, j = (int(p) for p in pair)
        except (TypeError, ValueError):
            logger.debug(f"Skipping malformed skeleton pair {pair!r}")
            continue
        if not (0 <= i < len(keypoints) and 0 <= j < len(keypoints)) or i == j:
            continue
        a, b = keypoints[i].id, keypoints[j].id
        if any(c.joins(a, b) for c in connections):
            continue
        connections.append(Connection(a, b))
    return connections


def decode_segmentation_line(line, width, height):
    """Decode `cls x1 y1 x2 y2 ...` into a Polygon; None with fewer than 3 vertices."""
    values = _parse_numbers(line)
    if values is None or len(values) < 7:
        if line.strip():
            logger.debug(f"Skipping malformed segmentation line: {line.strip()[:60]!r}")
        return None
    class_index = int(values[0])
    coords = values[1:]
    points = []
    for i in range(0, len(coords) - 1, 2):
        points.extend((denormalize(coords[i], width), denormalize(coords[i + 1], height)))
    return Polygon(points, name=f"class_{class_index}", category=class_index)


def decode_segmentation_text(text, width, height):
    polygons = []
    for line in text.splitlines():
        polygon = decode_segmentation_line(line, width, height)
        if polygon is not None:
            polygons.append(polygon)
    return polygons
