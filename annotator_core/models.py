# annotator_core/models.py
import random

from .geometry import Bounds, bounding_box_of, polygon_area
from .ids import new_id

# Keypoint visibility flags (COCO convention)
VISIBILITY_ABSENT = 0
VISIBILITY_OCCLUDED = 1
VISIBILITY_VISIBLE = 2
VISIBILITY_STATES = (VISIBILITY_ABSENT, VISIBILITY_OCCLUDED, VISIBILITY_VISIBLE)

DEFAULT_POLYGON_COLOR = "#00FF00"
MIN_BOX_SIZE = 5


def keypoint_label(index):
    """
    Spreadsheet-column label for the 0-based creation index:
    0 -> "A", 25 -> "Z", 26 -> "AA", 701 -> "ZZ", 702 -> "AAA".
    """
    if index < 0:
        raise ValueError(f"label index must be >= 0, got {index}")
    label = ""
    n = index + 1
    while n > 0:
        label = chr(65 + (n - 1) % 26) + label
        n = (n - 1) // 26
    return label


def check_visibility(value):
    if value not in VISIBILITY_STATES:
        raise ValueError(f"visibility must be one of {VISIBILITY_STATES}, got {value!r}")
    return value


def random_color():
    return "#{:06X}".format(random.randint(0, 0xFFFFFF))


class _Entity:
    """Equality and repr through to_dict()."""

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    __hash__ = None

    def __repr__(self):
        return f"{self.__class__.__name__}({self.to_dict()!r})"


class Polygon(_Entity):
    def __init__(self, points, name="", color=DEFAULT_POLYGON_COLOR, id=None, category=None):
        """
        points: open flat list [x0, y0, x1, y1, ...] with at least 3 vertices.
        The first vertex is repeated only when encoding (see closed_points).
        category: class index, set for shapes imported from YOLO segmentation.
        """
        if len(points) < 6:
            raise ValueError("a polygon needs at least 3 points")
        self.id = id if id is not None else new_id()
        self.points = list(points[:len(points) - len(points) % 2])
        self.name = name
        self.color = color
        self.category = category

    def closed_points(self):
        return self.points + self.points[:2]

    @property
    def area(self):
        return polygon_area(self.points)

    @property
    def bounds(self) -> Bounds:
        return bounding_box_of(self.points)

    def to_dict(self):
        d = {
            "id": self.id,
            "points": list(self.points),
            "name": self.name,
            "color": self.color,
        }
        if self.category is not None:
            d["category"] = self.category
        return d

    @staticmethod
    def from_dict(d):
        return Polygon(d["points"], d.get("name", ""), d.get("color", DEFAULT_POLYGON_COLOR),
                       d["id"], d.get("category"))


class BoundingBox(_Entity):
    def __init__(self, x, y, w, h, name="", color=None, id=None):
        """(x, y) is the top-left corner, (w, h) the extent in canvas pixels."""
        self.id = id if id is not None else new_id()
        self.x = x
        self.y = y
        self.w = w
        self.h = h
        self.name = name
        self.color = color if color is not None else random_color()

    @staticmethod
    def from_corners(x1, y1, x2, y2, **kwargs):
        return BoundingBox(min(x1, x2), min(y1, y2), abs(x2 - x1), abs(y2 - y1), **kwargs)

    def points(self):
        """The four corners as a flat polygon, clockwise from top-left."""
        x2, y2 = self.x + self.w, self.y + self.h
        return [self.x, self.y, x2, self.y, x2, y2, self.x, y2]

    def to_dict(self):
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "w": self.w,
            "h": self.h,
            "name": self.name,
            "color": self.color,
        }

    @staticmethod
    def from_dict(d):
        return BoundingBox(d["x"], d["y"], d["w"], d["h"], d.get("name", ""), d.get("color"), d["id"])


class Keypoint(_Entity):
    def __init__(self, x, y, name, visibility=VISIBILITY_VISIBLE, id=None):
        self.id = id if id is not None else new_id()
        self.x = x
        self.y = y
        self.name = name
        self.visibility = visibility

    def to_dict(self):
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "name": self.name,
            "visibility": self.visibility,
        }

    @staticmethod
    def from_dict(d):
        return Keypoint(d["x"], d["y"], d["name"], int(d.get("visibility", VISIBILITY_VISIBLE)), d["id"])


class Connection(_Entity):
    """Undirected edge between two keypoint ids."""

    def __init__(self, source, target):
        if source == target:
            raise ValueError(f"a keypoint cannot be connected to itself ({source!r})")
        self.source = source
        self.target = target

    def joins(self, a, b):
        return (self.source == a and self.target == b) or (self.source == b and self.target == a)

    def touches(self, keypoint_id):
        return keypoint_id in (self.source, self.target)

    def other(self, keypoint_id):
        return self.target if self.source == keypoint_id else self.source

    def __eq__(self, other):
        if not isinstance(other, Connection):
            return NotImplemented
        return other.joins(self.source, self.target)

    def to_dict(self):
        return {"from": self.source, "to": self.target}

    @staticmethod
    def from_dict(d):
        return Connection(d["from"], d["to"])


class TemplateKeypoint(_Entity):
    """Keypoint of a stored skeleton; x and y are fractions of the authoring canvas."""

    def __init__(self, x, y, name, id=None):
        self.id = id if id is not None else new_id()
        self.x = x
        self.y = y
        self.name = name

    def to_dict(self):
        return {"id": self.id, "x": self.x, "y": self.y, "name": self.name}

    @staticmethod
    def from_dict(d):
        return TemplateKeypoint(float(d["x"]), float(d["y"]), str(d["name"]), str(d["id"]))


class SkeletonTemplate(_Entity):
    def __init__(self, name, keypoints=None, connections=None, id=None):
        self.id = id if id is not None else new_id()
        self.name = name
        self.keypoints = keypoints if keypoints is not None else []
        self.connections = connections if connections is not None else []

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "keypoints": [kp.to_dict() for kp in self.keypoints],
            "connections": [c.to_dict() for c in self.connections],
        }

    @staticmethod
    def from_dict(d):
        return SkeletonTemplate(
            str(d["name"]),
            [TemplateKeypoint.from_dict(kp) for kp in d.get("keypoints", [])],
            [Connection.from_dict(c) for c in d.get("connections", [])],
            str(d["id"]),
        )
