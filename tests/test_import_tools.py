"""
Tests for the YOLO readers.
"""

import pytest

from annotator_core.export_tools import encode_keypoints_line, encode_segmentation_text
from annotator_core.import_tools import (
    connections_from_meta,
    decode_segmentation_text,
    decode_yolo_line,
    decode_yolo_text,
    read_yolo_file,
)
from annotator_core.models import Keypoint, Polygon


class TestDecodeYoloLine:
    def test_box_and_triples(self):
        obj = decode_yolo_line("0 0.5 0.5 0.2 0.4 0.1 0.2 2 0.3 0.4 1", 1000, 500)
        assert obj.class_index == 0
        assert obj.box == pytest.approx((500, 250, 200, 200))
        assert obj.points == [pytest.approx((100, 100, 2)), pytest.approx((300, 200, 1))]

    def test_bounds_from_center_box(self):
        obj = decode_yolo_line("0 0.5 0.5 0.2 0.4", 1000, 500)
        assert obj.bounds == pytest.approx((400, 150, 600, 350))
        assert obj.points == []

    def test_incomplete_trailing_group_dropped(self):
        obj = decode_yolo_line("0 0.5 0.5 0.2 0.2 0.1 0.1 2 0.9 0.9", 100, 100)
        assert len(obj.points) == 1

    @pytest.mark.parametrize("line", ["", "   ", "0 0.5 0.5 0.2", "0 a b c d", "0 0.5 nan 0.1 0.1"])
    def test_malformed_lines_skipped(self, line):
        assert decode_yolo_line(line, 100, 100) is None

    @pytest.mark.parametrize("flag", ["7", "-1", "1.5", "3"])
    def test_unknown_visibility_flag_skips_line(self, flag):
        line = f"0 0.5 0.5 0.2 0.2 0.1 0.1 2 0.3 0.3 {flag}"
        assert decode_yolo_line(line, 100, 100) is None

    def test_float_visibility_flag_accepted(self):
        obj = decode_yolo_line("0 0.5 0.5 0.2 0.2 0.1 0.1 1.0", 100, 100)
        assert obj.points[0][2] == 1

    def test_any_whitespace_separates(self):
        obj = decode_yolo_line("0\t0.5  0.5\t\t0.2 0.2", 100, 100)
        assert obj.box == pytest.approx((50, 50, 20, 20))

    def test_to_keypoints(self, seq_ids):
        obj = decode_yolo_line("0 0.5 0.5 0.2 0.2 0.1 0.1 2 0.2 0.2 0", 100, 100)
        keypoints = obj.to_keypoints()
        assert [kp.name for kp in keypoints] == ["A", "B"]
        assert [kp.visibility for kp in keypoints] == [2, 0]
        assert keypoints[0].x == pytest.approx(10)

    def test_to_keypoints_with_names(self, seq_ids):
        obj = decode_yolo_line("0 0.5 0.5 0.2 0.2 0.1 0.1 2 0.2 0.2 2 0.3 0.3 2", 100, 100)
        keypoints = obj.to_keypoints(["nose", None])
        assert [kp.name for kp in keypoints] == ["nose", "B", "C"]


class TestDecodeYoloText:
    def test_multi_object_file(self):
        text = "0 0.5 0.5 0.2 0.2\nbad line\n\n1 0.1 0.1 0.1 0.1 0.1 0.1 2\n"
        objects = decode_yolo_text(text, 100, 100)
        assert [o.class_index for o in objects] == [0, 1]

    def test_no_valid_lines(self):
        assert decode_yolo_text("garbage\n1 2\n", 100, 100) == []

    def test_read_file(self, tmp_path):
        path = tmp_path / "frame.txt"
        path.write_text("0 0.5 0.5 0.2 0.2 0.5 0.5 2\n")
        objects = read_yolo_file(path, 200, 100)
        assert objects[0].points == [pytest.approx((100, 50, 2))]


class TestYoloRoundTrip:
    def test_three_points_same_canvas(self, seq_ids):
        originals = [
            Keypoint(123.4567, 45.6789, "A", 2),
            Keypoint(456.789, 321.123, "B", 2),
            Keypoint(789.0123, 555.555, "C", 1),
        ]
        line = encode_keypoints_line(originals, 900, 600)
        obj = decode_yolo_line(line, 900, 600)

        for original, (x, y, v) in zip(originals, obj.points):
            assert x == pytest.approx(original.x, abs=1e-3)
            assert y == pytest.approx(original.y, abs=1e-3)
            assert v == original.visibility

        # Normalized values survive within the 6-decimal rounding
        cx, cy, bw, bh = obj.box
        assert cx / 900 == pytest.approx((123.4567 + 789.0123) / 2 / 900, abs=1e-4)
        assert cy / 600 == pytest.approx((45.6789 + 555.555) / 2 / 600, abs=1e-4)
        assert bw / 900 == pytest.approx((789.0123 - 123.4567) / 900, abs=1e-4)
        assert bh / 600 == pytest.approx((555.555 - 45.6789) / 600, abs=1e-4)
        for original, (x, y, _) in zip(originals, obj.points):
            assert x / 900 == pytest.approx(original.x / 900, abs=1e-4)
            assert y / 600 == pytest.approx(original.y / 600, abs=1e-4)

    def test_decode_on_other_canvas_scales(self, seq_ids):
        line = encode_keypoints_line([Keypoint(450, 300, "A")], 900, 600)
        obj = decode_yolo_line(line, 450, 300)
        assert obj.points[0][:2] == pytest.approx((225, 150))


class TestConnectionsFromMeta:
    def test_rebuilds_by_index(self, seq_ids):
        keypoints = [Keypoint(0, 0, "A"), Keypoint(1, 1, "B"), Keypoint(2, 2, "C")]
        meta = {"skeleton": [[0, 1], [1, 2], [2, 1], [0, 0], [0, 7], ["x", 1], 5]}
        connections = connections_from_meta(meta, keypoints)
        assert [c.to_dict() for c in connections] == [
            {"from": keypoints[0].id, "to": keypoints[1].id},
            {"from": keypoints[1].id, "to": keypoints[2].id},
        ]

    def test_non_dict_meta(self):
        assert connections_from_meta(["not", "a", "dict"], []) == []


class TestSegmentation:
    def test_decode(self):
        polygons = decode_segmentation_text("2 0 0 1 0 1 0.5\n3 0.1 0.1\n", 100, 100)
        assert len(polygons) == 1
        assert polygons[0].points == pytest.approx([0, 0, 100, 0, 100, 50])
        assert polygons[0].name == "class_2"
        assert polygons[0].category == 2

    def test_odd_trailing_coordinate_dropped(self):
        polygons = decode_segmentation_text("0 0 0 1 0 1 1 0.5", 10, 10)
        assert polygons[0].points == pytest.approx([0, 0, 10, 0, 10, 10])

    def test_round_trip(self, seq_ids):
        polygon = Polygon([10, 20, 60, 20, 60, 80, 10, 80], category=1)
        text = encode_segmentation_text([polygon], 100, 100)
        decoded = decode_segmentation_text(text, 100, 100)[0]
        assert decoded.points == pytest.approx(polygon.points)
        assert decoded.area == pytest.approx(polygon.area)
