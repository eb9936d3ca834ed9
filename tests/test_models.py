"""
Tests for annotation entities and id generation.
"""

import pytest

from annotator_core.ids import IdFactory, SequentialIds, new_id, use_id_factory
from annotator_core.models import (
    BoundingBox,
    Connection,
    Keypoint,
    Polygon,
    SkeletonTemplate,
    TemplateKeypoint,
    check_visibility,
    keypoint_label,
    random_color,
)


class TestKeypointLabel:
    """Spreadsheet-column labels."""

    def test_single_letters(self):
        assert [keypoint_label(i) for i in range(26)] == [chr(65 + i) for i in range(26)]

    @pytest.mark.parametrize("index,label", [
        (25, "Z"),
        (26, "AA"),
        (27, "AB"),
        (51, "AZ"),
        (52, "BA"),
        (701, "ZZ"),
        (702, "AAA"),
    ])
    def test_boundaries(self, index, label):
        assert keypoint_label(index) == label

    def test_negative_index(self):
        with pytest.raises(ValueError):
            keypoint_label(-1)


class TestIds:
    def test_default_ids_are_unique(self):
        assert new_id() != new_id()

    def test_sequential_factory_is_scoped(self):
        with use_id_factory(SequentialIds("kp")):
            assert new_id() == "kp-1"
            assert new_id() == "kp-2"
        assert not new_id().startswith("kp-")

    def test_default_factory_is_uuid(self):
        assert len(IdFactory()()) == 36


class TestPolygon:
    def test_requires_three_points(self):
        with pytest.raises(ValueError):
            Polygon([0, 0, 1, 1])

    def test_closed_points_repeat_first_vertex(self, seq_ids):
        polygon = Polygon([0, 0, 4, 0, 0, 3])
        assert polygon.closed_points() == [0, 0, 4, 0, 0, 3, 0, 0]
        assert polygon.points == [0, 0, 4, 0, 0, 3]
        assert polygon.area == 6
        assert polygon.bounds.to_xywh() == [0, 0, 4, 3]

    def test_dict_round_trip(self, seq_ids):
        polygon = Polygon([0, 0, 4, 0, 0, 3], name="roof", category=2)
        assert Polygon.from_dict(polygon.to_dict()) == polygon


class TestBoundingBox:
    def test_from_corners_normalizes_direction(self, seq_ids):
        box = BoundingBox.from_corners(20, 30, 10, 10)
        assert (box.x, box.y, box.w, box.h) == (10, 10, 10, 20)

    def test_points_are_rectangle(self, seq_ids):
        box = BoundingBox(1, 2, 3, 4, color="#FFFFFF")
        assert box.points() == [1, 2, 4, 2, 4, 6, 1, 6]

    def test_random_color(self):
        color = random_color()
        assert color.startswith("#") and len(color) == 7
        int(color[1:], 16)


class TestKeypointAndConnection:
    def test_keypoint_defaults(self, seq_ids):
        kp = Keypoint(10, 20, "A")
        assert kp.visibility == 2
        assert kp.id == "id-1"

    def test_check_visibility(self):
        for value in (0, 1, 2):
            assert check_visibility(value) == value
        with pytest.raises(ValueError):
            check_visibility(3)

    def test_connection_is_undirected(self):
        assert Connection("a", "b") == Connection("b", "a")
        assert Connection("a", "b").joins("b", "a")
        assert Connection("a", "b").other("a") == "b"

    def test_self_connection_rejected(self):
        with pytest.raises(ValueError):
            Connection("a", "a")

    def test_connection_dict_uses_from_to(self):
        assert Connection("a", "b").to_dict() == {"from": "a", "to": "b"}


class TestSkeletonTemplate:
    def test_dict_round_trip(self):
        template = SkeletonTemplate(
            "arm",
            [TemplateKeypoint(0.1, 0.2, "shoulder", "s"), TemplateKeypoint(0.3, 0.4, "elbow", "e")],
            [Connection("s", "e")],
            "tpl-1",
        )
        data = template.to_dict()
        assert data["connections"] == [{"from": "s", "to": "e"}]
        assert SkeletonTemplate.from_dict(data) == template

    def test_from_dict_rejects_missing_fields(self):
        with pytest.raises(KeyError):
            SkeletonTemplate.from_dict({"name": "no id"})
