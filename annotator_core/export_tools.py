# annotator_core/export_tools.py
import os
import json
from datetime import date

from .geometry import bounding_box_of, flatten_points, format_normalized, normalize, polygon_area
from .linking import live_connections
from .logger import get_logger
from .models import BoundingBox

logger = get_logger(__name__)

COCO_VERSION = "1.0"
COCO_DESCRIPTION = "Exported from annotator-core"


def base_name(file_name):
    """'photos/cat.v2.jpg' -> 'cat.v2'"""
    return os.path.splitext(os.path.basename(file_name))[0]


def ordered_keypoints(keypoints):
    """Keypoints in export order: by name, ties kept in creation order."""
    return sorted(keypoints, key=lambda kp: kp.name)


# --------------------------------------------------------------------------
# YOLO pose
# --------------------------------------------------------------------------

def encode_keypoints_line(keypoints, width, height, class_index=0):
    """
    One YOLO pose record for the keypoint set:
        cls cx cy bw bh x1 y1 v1 x2 y2 v2 ...
    The box is the extent of the keypoints. Spatial values are fractions of
    the canvas size with 6 decimals. Returns None for an empty set.
    """
    if not keypoints:
        return None
    ordered = ordered_keypoints(keypoints)
    bounds = bounding_box_of(flatten_points((kp.x, kp.y) for kp in ordered))
    cx, cy = bounds.center

    def nx(v):
        return format_normalized(normalize(v, width))

    def ny(v):
        return format_normalized(normalize(v, height))

    parts = [str(class_index), nx(cx), ny(cy), nx(bounds.width), ny(bounds.height)]
    for kp in ordered:
        parts.extend((nx(kp.x), ny(kp.y), str(int(kp.visibility))))
    return " ".join(parts)


def encode_yolo_text(lines):
    """Join per-object records into file content, skipping empty records."""
    return "\n".join(line for line in lines if line)


# --------------------------------------------------------------------------
# YOLO segmentation
# --------------------------------------------------------------------------

def encode_segmentation_line(polygon, width, height, class_index=0):
    parts = [str(class_index)]
    for i in range(0, len(polygon.points), 2):
        parts.append(format_normalized(normalize(polygon.points[i], width)))
        parts.append(format_normalized(normalize(polygon.points[i + 1], height)))
    return " ".join(parts)


def encode_segmentation_text(polygons, width, height, class_index=0):
    """
    One line per polygon: cls x1 y1 x2 y2 ... (normalized, open ring).
    A polygon carrying its own category keeps it; others use class_index.
    """
    lines = []
    for polygon in polygons:
        cls = polygon.category if polygon.category is not None else class_index
        lines.append(encode_segmentation_line(polygon, width, height, cls))
    return encode_yolo_text(lines)


# --------------------------------------------------------------------------
# JSON formats
# --------------------------------------------------------------------------

def coco_annotation(shape, index):
    """COCO annotation dict for a Polygon or a BoundingBox (as its rectangle)."""
    if isinstance(shape, BoundingBox):
        points = shape.points()
        segmentation = points + points[:2]
    else:
        segmentation = shape.closed_points()
    bounds = bounding_box_of(segmentation)
    return {
        "id": index,
        "image_id": 1,
        "category_id": 1,
        "segmentation": [segmentation],
        "area": polygon_area(segmentation),
        "bbox": bounds.to_xywh(),
        "iscrowd": 0,
    }


def build_coco(shapes, width, height, file_name, year=None, description=COCO_DESCRIPTION):
    return {
        "info": {
            "year": year if year is not None else date.today().year,
            "version": COCO_VERSION,
            "description": description,
        },
        "licenses": [],
        "images": [{"id": 1, "width": width, "height": height, "file_name": file_name}],
        "categories": [{"id": 1, "name": "object"}],
        "annotations": [coco_annotation(shape, i + 1) for i, shape in enumerate(shapes)],
    }


def build_bbox_json(boxes, file_name):
    return {
        "image": file_name,
        "boxes": [
            {"label": box.name, "x": box.x, "y": box.y, "w": box.w, "h": box.h}
            for box in boxes
        ],
    }


def build_skeleton_meta(keypoints, connections):
    """
    Names and topology matching the order of encode_keypoints_line, so a
    viewer can draw the skeleton from the YOLO record alone:
        {"names": ["A", "B", ...], "skeleton": [[0, 1], ...]}
    """
    ordered = ordered_keypoints(keypoints)
    index = {kp.id: i for i, kp in enumerate(ordered)}
    return {
        "names": [kp.name for kp in ordered],
        "skeleton": [
            [index[c.source], index[c.target]]
            for c in live_connections(connections, index)
        ],
    }


# --------------------------------------------------------------------------
# Writers
# --------------------------------------------------------------------------

def _write_text(path, text):
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w") as f:
        f.write(text)
    return path


def _write_json(path, data):
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
    return path


def write_yolo_keypoints(keypoints, width, height, file_name, out_dir, class_index=0):
    line = encode_keypoints_line(keypoints, width, height, class_index)
    if line is None:
        logger.info("No keypoints to export")
        return None
    path = _write_text(os.path.join(out_dir, base_name(file_name) + ".txt"), line)
    logger.info(f"Keypoints saved in YOLO format to {path}")
    return path


def write_skeleton_meta(keypoints, connections, file_name, out_dir):
    if not keypoints:
        return None
    path = _write_json(os.path.join(out_dir, base_name(file_name) + "_meta.json"),
                       build_skeleton_meta(keypoints, connections))
    logger.info(f"Skeleton meta saved to {path}")
    return path


def write_coco(shapes, width, height, file_name, out_dir, year=None):
    path = _write_json(os.path.join(out_dir, base_name(file_name) + "_coco.json"),
                       build_coco(shapes, width, height, file_name, year))
    logger.info(f"{len(shapes)} shapes saved in COCO format to {path}")
    return path


def write_bbox_json(boxes, file_name, out_dir):
    if not boxes:
        logger.info("No boxes to export")
        return None
    path = _write_json(os.path.join(out_dir, base_name(file_name) + "_bbox.json"),
                       build_bbox_json(boxes, file_name))
    logger.info(f"{len(boxes)} boxes saved to {path}")
    return path


def write_segmentation(polygons, width, height, file_name, out_dir, class_index=0):
    if not polygons:
        return None
    path = _write_text(os.path.join(out_dir, base_name(file_name) + "_seg.txt"),
                       encode_segmentation_text(polygons, width, height, class_index))
    logger.info(f"{len(polygons)} polygons saved in YOLO segmentation format to {path}")
    return path
