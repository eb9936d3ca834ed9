# annotator_core/__init__.py
from .session import KeypointSession
from .shapes import BoxSession, PolygonSession, PolygonState
from .models import (BoundingBox, Connection, Keypoint, Polygon, SkeletonTemplate, TemplateKeypoint,
                     keypoint_label)
from .history import HistoryManager, pop_last
from .linking import LinkBuilder, LinkState, PickResult
from .image import ImageInfo, load_image
from .templates import JsonFileStore, MemoryStore, SkeletonLibrary, instantiate_template
from .export_tools import build_bbox_json, build_coco, build_skeleton_meta, encode_keypoints_line
from .import_tools import decode_segmentation_text, decode_yolo_line, decode_yolo_text
from .geometry import bounding_box_of, distance, point_in_polygon, polygon_area
from .exceptions import AnnotatorError, EntityNotFoundError, ImageLoadError, MissingNameError, NoImageError

__version__ = "0.1.0"
