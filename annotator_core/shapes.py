# annotator_core/shapes.py
"""
Polygon and bounding-box editing sessions.

PolygonSession undoes only the last append (draft point, else last shape)
and has no redo. BoxSession snapshots its box list before every change and
supports undo and redo.
"""

from enum import Enum

from .config import get_config
from .exceptions import EntityNotFoundError, NoImageError
from .export_tools import build_bbox_json, build_coco, write_bbox_json, write_coco
from .geometry import clamp, is_near_start, point_in_polygon
from .history import HistoryManager, pop_last
from .image import load_image
from .logger import get_logger
from .models import BoundingBox, Polygon

logger = get_logger(__name__)


class PolygonState(Enum):
    IDLE = "idle"
    DRAWING = "drawing"


class _ShapeSessionBase:
    def __init__(self, width=None, height=None, file_name=""):
        self.image = None
        self.file_name = file_name
        self.width = width
        self.height = height

    @property
    def has_image(self):
        return self.width is not None and self.height is not None

    def _require_image(self):
        if not self.has_image:
            raise NoImageError("Load an image before drawing")

    def _set_image(self, info):
        self.image = info
        self.file_name = info.file_name
        self.width, self.height = info.width, info.height

    def _max_width(self):
        return get_config().max_width

    def open_image(self, path):
        """Load an image file with Pillow and start over on it."""
        info = load_image(path, self._max_width())
        self.load_image(info)
        return info

    def _find(self, items, item_id, kind):
        for item in items:
            if item.id == item_id:
                return item
        raise EntityNotFoundError(f"Unknown {kind}", entity_id=item_id)


class PolygonSession(_ShapeSessionBase):
    def __init__(self, width=None, height=None, file_name="", close_threshold=None):
        super().__init__(width, height, file_name)
        self.close_threshold = close_threshold if close_threshold is not None else get_config().close_threshold
        self.shapes = []
        # Flat [x0, y0, x1, y1, ...] of the polygon being drawn
        self.draft = []

    def _max_width(self):
        return get_config().polygon_max_width

    @property
    def state(self):
        return PolygonState.DRAWING if self.draft else PolygonState.IDLE

    def load_image(self, info):
        self._set_image(info)
        self.shapes = []
        self.draft = []
        logger.info(f"Polygon session reset for {info.file_name} ({self.width}x{self.height})")

    def is_over_start(self, pointer):
        return is_near_start(self.draft, pointer, self.close_threshold)

    def click(self, x, y):
        """
        A canvas click while drawing. Closes the draft when the click lands
        on its first vertex (and it has 3+ vertices), else adds a vertex.
        Returns the new Polygon when one was closed, otherwise None.
        """
        self._require_image()
        if self.is_over_start((x, y)):
            return self.close_shape()
        self.draft.extend((x, y))
        return None

    def close_shape(self):
        """Turn the draft into a Polygon; None (draft kept) with fewer than 3 vertices."""
        if len(self.draft) < 6:
            return None
        polygon = Polygon(self.draft, name=f"Polygon {len(self.shapes) + 1}")
        self.shapes.append(polygon)
        self.draft = []
        return polygon

    def preview_points(self, pointer=None):
        """Draft vertices plus the rubber-band point under the cursor."""
        if pointer is None or not self.draft:
            return list(self.draft)
        return self.draft + [pointer[0], pointer[1]]

    def undo(self):
        if self.draft:
            return bool(pop_last(self.draft, 2))
        return bool(pop_last(self.shapes))

    def shape_at(self, x, y):
        """The topmost finished polygon containing (x, y), or None."""
        for shape in reversed(self.shapes):
            if point_in_polygon(x, y, shape.points):
                return shape
        return None

    def rename_shape(self, shape_id, name):
        shape = self._find(self.shapes, shape_id, "polygon")
        shape.name = name
        return shape

    def delete_shape(self, shape_id):
        self._find(self.shapes, shape_id, "polygon")
        self.shapes = [s for s in self.shapes if s.id != shape_id]

    def clear(self):
        self.shapes = []
        self.draft = []

    def to_coco(self, year=None):
        self._require_image()
        return build_coco(self.shapes, self.width, self.height, self.file_name, year)

    def export_coco(self, out_dir):
        self._require_image()
        return write_coco(self.shapes, self.width, self.height, self.file_name, out_dir)


class BoxSession(_ShapeSessionBase):
    def __init__(self, width=None, height=None, file_name="", min_size=None):
        super().__init__(width, height, file_name)
        self.min_size = min_size if min_size is not None else get_config().min_box_size
        self.boxes = []
        self.history = HistoryManager()
        # (start_x, start_y, current_x, current_y) during a drag
        self.drag = None
        self.selected = None

    def load_image(self, info):
        self._set_image(info)
        self.boxes = []
        self.drag = None
        self.selected = None
        self.history.clear()
        logger.info(f"Box session reset for {info.file_name} ({self.width}x{self.height})")

    def get_box(self, box_id):
        return self._find(self.boxes, box_id, "box")

    def _record(self):
        self.history.snapshot(self.boxes)

    # Drawing

    def begin_drag(self, x, y):
        self._require_image()
        self.selected = None
        self.drag = (x, y, x, y)

    def drag_to(self, x, y):
        if self.drag is None:
            return
        self.drag = (self.drag[0], self.drag[1], x, y)

    def draft_box(self):
        """The box being dragged as (x, y, w, h) with signed extent, or None."""
        if self.drag is None:
            return None
        x1, y1, x2, y2 = self.drag
        return x1, y1, x2 - x1, y2 - y1

    def end_drag(self):
        """
        Finish the drag. Boxes whose width or height does not exceed the
        minimum size are discarded. Returns the new box or None.
        """
        if self.drag is None:
            return None
        x1, y1, x2, y2 = self.drag
        self.drag = None
        if abs(x2 - x1) <= self.min_size or abs(y2 - y1) <= self.min_size:
            return None
        self._record()
        box = BoundingBox.from_corners(x1, y1, x2, y2, name=f"Box {len(self.boxes) + 1}")
        self.boxes.append(box)
        return box

    # Editing

    def select(self, box_id):
        self.selected = self.get_box(box_id).id

    def move_box(self, box_id, x, y):
        """Place the box's top-left corner at (x, y), kept on the canvas."""
        box = self.get_box(box_id)
        self._record()
        box.x = clamp(x, 0, max(self.width - box.w, 0))
        box.y = clamp(y, 0, max(self.height - box.h, 0))
        return box

    def resize_box(self, box_id, w, h):
        """Set the extent. Sizes below the minimum are rejected: returns False, box unchanged."""
        box = self.get_box(box_id)
        if w < self.min_size or h < self.min_size:
            return False
        self._record()
        box.w = w
        box.h = h
        return True

    def rename_box(self, box_id, name):
        box = self.get_box(box_id)
        self._record()
        box.name = name
        return box

    def delete_box(self, box_id):
        self.get_box(box_id)
        self._record()
        self.boxes = [b for b in self.boxes if b.id != box_id]
        if self.selected == box_id:
            self.selected = None

    def clear(self):
        if not self.boxes:
            return
        self._record()
        self.boxes = []
        self.selected = None

    def undo(self):
        state = self.history.undo(self.boxes)
        if state is None:
            return False
        self._restore(state)
        return True

    def redo(self):
        state = self.history.redo(self.boxes)
        if state is None:
            return False
        self._restore(state)
        return True

    def _restore(self, boxes):
        self.boxes = boxes
        if self.selected not in {b.id for b in boxes}:
            self.selected = None

    # Export

    def to_json(self):
        return build_bbox_json(self.boxes, self.file_name)

    def to_coco(self, year=None):
        self._require_image()
        return build_coco(self.boxes, self.width, self.height, self.file_name, year)

    def export_json(self, out_dir):
        return write_bbox_json(self.boxes, self.file_name, out_dir)

    def export_coco(self, out_dir):
        self._require_image()
        return write_coco(self.boxes, self.width, self.height, self.file_name, out_dir)
