from __future__ import annotations

from datetime import date, datetime, time

import pytest

from training_attendance.core.exceptions import ConflictError, DeadlinePassedError, NotFoundError


@pytest.fixture
def setup(world):
    c = world.db.add_class()
    s = world.db.add_student()
    morning = world.db.add_session(class_id=c.class_id, session_date=date(2025, 1, 5), start=time(9, 0))
    afternoon = world.db.add_session(
        class_id=c.class_id, session_date=date(2025, 1, 5), start=time(14, 0), end=time(16, 0), name="Ca chiều"
    )
    return world, s, morning, afternoon


def test_register_creates_registration(setup):
    world, s, morning, _ = setup

    reg = world.container.registration_service.register(student_id=s.student_id, session_id=morning.session_id)

    assert reg.session_id == morning.session_id
    assert reg.session_date == date(2025, 1, 5)
    assert reg.registered_at == datetime(2025, 1, 1, 8, 0)


def test_same_session_twice_conflicts(setup):
    world, s, morning, _ = setup
    world.container.registration_service.register(student_id=s.student_id, session_id=morning.session_id)

    with pytest.raises(ConflictError, match="đã đăng ký"):
        world.container.registration_service.register(student_id=s.student_id, session_id=morning.session_id)


def test_other_session_same_day_conflicts(setup):
    world, s, morning, afternoon = setup
    world.container.registration_service.register(student_id=s.student_id, session_id=morning.session_id)

    with pytest.raises(ConflictError, match="1 ca học mỗi ngày"):
        world.container.registration_service.register(student_id=s.student_id, session_id=afternoon.session_id)


def test_registering_exactly_at_deadline_succeeds(setup):
    world, s, morning, _ = setup
    world.clock.set(morning.registration_deadline)

    reg = world.container.registration_service.register(student_id=s.student_id, session_id=morning.session_id)

    assert reg.registration_id > 0


def test_registering_after_deadline_fails(setup):
    world, s, morning, _ = setup
    world.clock.set(datetime(2025, 1, 5, 7, 0, 1))

    with pytest.raises(DeadlinePassedError):
        world.container.registration_service.register(student_id=s.student_id, session_id=morning.session_id)


def test_deleted_or_unknown_session_is_not_found(setup):
    world, s, morning, _ = setup
    world.container.session_service.soft_delete_session(morning.session_id)

    with pytest.raises(NotFoundError):
        world.container.registration_service.register(student_id=s.student_id, session_id=morning.session_id)
    with pytest.raises(NotFoundError):
        world.container.registration_service.register(student_id=s.student_id, session_id=999)


def test_my_registrations_newest_first_with_sessions(setup):
    world, s, morning, _ = setup
    c_id = morning.class_id
    later = world.db.add_session(class_id=c_id, session_date=date(2025, 1, 8))
    world.container.registration_service.register(student_id=s.student_id, session_id=morning.session_id)
    world.container.registration_service.register(student_id=s.student_id, session_id=later.session_id)

    rows = world.container.registration_service.my_registrations(s.student_id)

    assert [r["session"].session_id for r in rows] == [later.session_id, morning.session_id]


def test_one_session_per_day_follows_a_moved_session(setup):
    world, s, morning, afternoon = setup
    next_day = world.db.add_session(class_id=morning.class_id, session_date=date(2025, 1, 6))
    world.container.registration_service.register(student_id=s.student_id, session_id=morning.session_id)

    world.container.session_service.update_session(
        morning.session_id,
        class_id=morning.class_id,
        session_date="2025-01-06",
        name=morning.name,
        start_time="09:00",
        end_time="11:00",
    )

    with pytest.raises(ConflictError, match="1 ca học mỗi ngày"):
        world.container.registration_service.register(student_id=s.student_id, session_id=next_day.session_id)
    reg = world.container.registration_service.register(student_id=s.student_id, session_id=afternoon.session_id)
    assert reg.session_date == date(2025, 1, 5)
