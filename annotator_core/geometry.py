# annotator_core/geometry.py
import math
from collections import namedtuple

# Pixel distance from the first vertex that counts as "closing" a polygon.
CLOSE_THRESHOLD = 10


class Bounds(namedtuple("Bounds", ["min_x", "min_y", "max_x", "max_y"])):
    """Axis-aligned extrema of a point set."""
    __slots__ = ()

    @property
    def width(self):
        return self.max_x - self.min_x

    @property
    def height(self):
        return self.max_y - self.min_y

    @property
    def center(self):
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    def to_xywh(self):
        """COCO style [x, y, width, height]."""
        return [self.min_x, self.min_y, self.width, self.height]


def pair_points(points):
    """[x0, y0, x1, y1, ...] -> [(x0, y0), (x1, y1), ...]. A trailing odd value is dropped."""
    return [(points[i], points[i + 1]) for i in range(0, len(points) - 1, 2)]


def flatten_points(pairs):
    """[(x0, y0), (x1, y1), ...] -> [x0, y0, x1, y1, ...]"""
    flat = []
    for x, y in pairs:
        flat.extend((x, y))
    return flat


def polygon_area(points):
    """
    Area of the polygon given as a flat coordinate list, using the shoelace
    formula with wraparound to the first vertex.
    Fewer than 3 vertices (6 values) gives 0.
    """
    n = len(points) - len(points) % 2
    if n < 6:
        return 0
    total = 0
    for i in range(0, n, 2):
        x1, y1 = points[i], points[i + 1]
        x2, y2 = points[(i + 2) % n], points[(i + 3) % n]
        total += x1 * y2 - x2 * y1
    return abs(total) / 2


def bounding_box_of(points):
    """
    Bounds of a flat coordinate list.
    Raises ValueError for an empty list.
    """
    if len(points) < 2:
        raise ValueError("bounding_box_of() needs at least one point")
    min_x = max_x = points[0]
    min_y = max_y = points[1]
    for x, y in pair_points(points)[1:]:
        if x < min_x:
            min_x = x
        elif x > max_x:
            max_x = x
        if y < min_y:
            min_y = y
        elif y > max_y:
            max_y = y
    return Bounds(min_x, min_y, max_x, max_y)


def normalize(value, extent):
    return value / extent


def denormalize(value, extent):
    return value * extent


def format_normalized(value):
    """Fixed 6-decimal string used by the YOLO writers."""
    return f"{value:.6f}"


def clamp(value, lo, hi):
    return max(lo, min(hi, value))


def distance(p1, p2):
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])


def point_in_radius(point, center, radius):
    return distance(point, center) <= radius


def is_near_start(points, pointer, threshold=CLOSE_THRESHOLD):
    """
    True when `pointer` is within `threshold` pixels of the first vertex of
    the in-progress flat point list and the list holds at least 3 vertices.
    """
    if pointer is None or len(points) < 6:
        return False
    return distance((points[0], points[1]), pointer) < threshold


def point_in_polygon(x, y, points):
    """Even-odd ray cast against a flat [x0, y0, x1, y1, ...] ring."""
    vertices = pair_points(points)
    if len(vertices) < 3:
        return False
    inside = False
    prev_x, prev_y = vertices[-1]
    for cur_x, cur_y in vertices:
        if (cur_y > y) != (prev_y > y):
            # x where the edge crosses the horizontal through y
            cross_x = cur_x + (y - cur_y) * (prev_x - cur_x) / (prev_y - cur_y)
            if x < cross_x:
                inside = not inside
        prev_x, prev_y = cur_x, cur_y
    return inside
