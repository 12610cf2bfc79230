from __future__ import annotations

import pytest

from training_attendance.core.exceptions import NotFoundError, ValidationError


def test_register_face_marks_student_when_matched(world):
    s = world.db.add_student(face_registered=False)

    result = world.container.face_service.register_face(student_id=s.student_id, selfie_url="http://img/selfie.jpg")

    assert result.matched is True
    assert world.db.students[s.student_id].face_registered is True
    assert world.matcher.calls == [("http://img/avatar.jpg", "http://img/selfie.jpg")]


def test_register_face_leaves_flag_when_not_matched(world):
    s = world.db.add_student(face_registered=False)
    world.matcher.matched = False

    result = world.container.face_service.register_face(student_id=s.student_id, selfie_url="http://img/selfie.jpg")

    assert result.matched is False
    assert world.db.students[s.student_id].face_registered is False


def test_register_face_requires_avatar(world):
    s = world.db.add_student(avatar_url=None, face_registered=False)

    with pytest.raises(ValidationError):
        world.container.face_service.register_face(student_id=s.student_id, selfie_url="http://img/selfie.jpg")


def test_register_face_unknown_student(world):
    with pytest.raises(NotFoundError):
        world.container.face_service.register_face(student_id=404, selfie_url="http://img/selfie.jpg")
