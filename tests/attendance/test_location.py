from __future__ import annotations

import pytest

from training_attendance.attendance.location import describe_location, haversine_meters
from training_attendance.classes.model import TrainingClass


def _class(lat=10.7769, lng=106.7009):
    return TrainingClass(
        class_id=1,
        code="TC000001",
        name="Lớp A",
        class_type="Cơ bản",
        location=None,
        academic_year="2025",
        latitude=lat,
        longitude=lng,
    )


def test_haversine_zero_for_same_point():
    assert haversine_meters(10.0, 106.0, 10.0, 106.0) == pytest.approx(0.0)


def test_haversine_one_degree_latitude():
    assert haversine_meters(0.0, 0.0, 1.0, 0.0) == pytest.approx(111_195, rel=1e-3)


def test_far_note_carries_rounded_distance():
    note = describe_location(_class(), 10.0, 106.0, distance_fn=lambda *_: 523.4)

    assert note == "Vị trí xa lớp học (523m)"


def test_exactly_at_threshold_is_not_far():
    assert describe_location(_class(), 10.0, 106.0, distance_fn=lambda *_: 100.0) is None


def test_close_check_in_has_no_note():
    assert describe_location(_class(), 10.7770, 106.7010) is None


def test_missing_gps_note():
    assert describe_location(_class(), None, 106.0) == "Chưa có vị trí check-in"


def test_class_without_coordinates_note():
    assert describe_location(_class(lat=None, lng=None), 10.0, 106.0) == "Chưa có vị trí lớp học"
