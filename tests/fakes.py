from __future__ import annotations

import itertools
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from typing import Optional

from training_attendance.attendance.model import AttendanceRecord, AttendanceRow
from training_attendance.classes.model import TrainingClass
from training_attendance.container import Container, wire_services
from training_attendance.common.datetime_utils import registration_deadline
from training_attendance.core.constants import REGISTRATION_LEAD_MINUTES
from training_attendance.core.enums import AttendanceStatus, EnrollmentStatus
from training_attendance.core.exceptions import ConflictError
from training_attendance.enrollments.model import EnrollmentRequest, EnrollmentRequestRow
from training_attendance.faces.model import FaceMatchResult
from training_attendance.registrations.model import SessionRegistration
from training_attendance.sessions.model import ClassSession
from training_attendance.students.model import Student


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now


class Db:
    """Shared in-memory tables behind the fake repositories."""

    def __init__(self):
        self.classes: dict[int, TrainingClass] = {}
        self.students: dict[int, Student] = {}
        self.sessions: dict[int, ClassSession] = {}
        self.enrollments: dict[int, EnrollmentRequest] = {}
        self.registrations: dict[int, SessionRegistration] = {}
        self.attendance: dict[int, AttendanceRecord] = {}
        self._ids = itertools.count(1)

    def next_id(self) -> int:
        return next(self._ids)

    # ---- seeding helpers

    def add_class(self, *, name="Lớp A", latitude=10.0, longitude=106.0, academic_year="2025") -> TrainingClass:
        cid = self.next_id()
        c = TrainingClass(
            class_id=cid,
            code=f"TC{cid:06d}",
            name=name,
            class_type="Cơ bản",
            location="Phòng 101",
            academic_year=academic_year,
            latitude=latitude,
            longitude=longitude,
            created_at=datetime(2024, 12, 1, 8, 0),
        )
        self.classes[cid] = c
        return c

    def add_student(self, *, code="HV001", name="Nguyễn Văn A", avatar_url="http://img/avatar.jpg", face_registered=True) -> Student:
        sid = self.next_id()
        s = Student(
            student_id=sid,
            student_code=code,
            full_name=name,
            avatar_url=avatar_url,
            face_registered=face_registered,
        )
        self.students[sid] = s
        return s

    def add_session(
        self,
        *,
        class_id: int,
        session_date: date,
        start: time = time(9, 0),
        end: time = time(11, 0),
        name: str = "Ca sáng",
        is_auto_selected: bool = False,
        is_deleted: bool = False,
    ) -> ClassSession:
        sid = self.next_id()
        s = ClassSession(
            session_id=sid,
            class_id=class_id,
            session_date=session_date,
            name=name,
            start_time=start,
            end_time=end,
            registration_deadline=registration_deadline(session_date, start, lead_minutes=REGISTRATION_LEAD_MINUTES),
            is_auto_selected=is_auto_selected,
            is_deleted=is_deleted,
        )
        self.sessions[sid] = s
        return s

    def approve(self, *, student_id: int, class_id: int, at: datetime) -> EnrollmentRequest:
        rid = self.next_id()
        e = EnrollmentRequest(
            request_id=rid,
            student_id=student_id,
            class_id=class_id,
            status=EnrollmentStatus.APPROVED,
            requested_at=at,
            reviewed_by=1,
            reviewed_at=at,
        )
        self.enrollments[rid] = e
        return e

    def add_attendance(
        self,
        *,
        student_id: int,
        session_id: int,
        check_in_time: datetime,
        status: AttendanceStatus,
        location_note: Optional[str] = None,
        lat: Optional[float] = 10.0,
        lng: Optional[float] = 106.0,
    ) -> AttendanceRecord:
        aid = self.next_id()
        r = AttendanceRecord(
            attendance_id=aid,
            student_id=student_id,
            session_id=session_id,
            status=status,
            check_in_time=check_in_time,
            check_in_lat=lat,
            check_in_lng=lng,
            check_in_face_score=0.9,
            location_note=location_note,
        )
        self.attendance[aid] = r
        return r


class FakeClassRepo:
    def __init__(self, db: Db):
        self._db = db

    def get_by_id(self, class_id):
        return self._db.classes.get(int(class_id))

    def list_all(self):
        return sorted(self._db.classes.values(), key=lambda c: c.class_id, reverse=True)

    def create(self, *, code, name, class_type, location, academic_year, latitude, longitude, created_at):
        cid = self._db.next_id()
        self._db.classes[cid] = TrainingClass(
            class_id=cid,
            code=code,
            name=name,
            class_type=class_type,
            location=location,
            academic_year=academic_year,
            latitude=latitude,
            longitude=longitude,
            created_at=created_at,
        )
        return cid

    def update(self, *, class_id, **fields):
        c = self._db.classes.get(int(class_id))
        if not c:
            return False
        self._db.classes[int(class_id)] = replace(c, **fields)
        return True

    def delete(self, class_id):
        return self._db.classes.pop(int(class_id), None) is not None

    def has_dependents(self, class_id):
        return any(s.class_id == class_id for s in self._db.sessions.values()) or any(
            e.class_id == class_id for e in self._db.enrollments.values()
        )


class FakeStudentRepo:
    def __init__(self, db: Db):
        self._db = db

    def get_by_id(self, student_id):
        return self._db.students.get(int(student_id))

    def mark_face_registered(self, student_id):
        s = self._db.students.get(int(student_id))
        if not s:
            return False
        self._db.students[s.student_id] = replace(s, face_registered=True)
        return True


class FakeSessionRepo:
    def __init__(self, db: Db):
        self._db = db

    def get_by_id(self, session_id):
        return self._db.sessions.get(int(session_id))

    def get_many(self, session_ids):
        return [self._db.sessions[i] for i in session_ids if i in self._db.sessions]

    def count_active(self, *, class_id, session_date):
        return sum(
            1
            for s in self._db.sessions.values()
            if s.class_id == class_id and s.session_date == session_date and not s.is_deleted
        )

    def create(self, *, class_id, session_date, name, start_time, end_time, registration_deadline, is_auto_selected=False):
        sid = self._db.next_id()
        self._db.sessions[sid] = ClassSession(
            session_id=sid,
            class_id=class_id,
            session_date=session_date,
            name=name,
            start_time=start_time,
            end_time=end_time,
            registration_deadline=registration_deadline,
            is_auto_selected=is_auto_selected,
        )
        return sid

    def update(self, *, session_id, **fields):
        s = self._db.sessions.get(int(session_id))
        if not s:
            return False
        new_date = fields.get("session_date", s.session_date)
        moved = [r for r in self._db.registrations.values() if r.session_id == s.session_id]
        booked = {
            (r.student_id, r.session_date) for r in self._db.registrations.values() if r.session_id != s.session_id
        }
        for r in moved:
            if (r.student_id, new_date) in booked:
                raise ConflictError("Có học viên đã đăng ký ca học khác vào ngày này, không thể dời ca học")
        for r in moved:
            self._db.registrations[r.registration_id] = replace(r, session_date=new_date)
        self._db.sessions[s.session_id] = replace(s, **fields)
        return True

    def soft_delete(self, session_id):
        s = self._db.sessions.get(int(session_id))
        if not s:
            return False
        self._db.sessions[s.session_id] = replace(s, is_deleted=True)
        return True

    def _active(self, class_ids):
        return [
            s
            for s in self._db.sessions.values()
            if not s.is_deleted and (class_ids is None or s.class_id in class_ids)
        ]

    def list_by_date(self, *, session_date, class_ids=None):
        rows = [s for s in self._active(class_ids) if s.session_date == session_date]
        return sorted(rows, key=lambda s: (s.start_time, s.session_id))

    def list_range(self, *, start, end, class_ids=None):
        rows = [s for s in self._active(class_ids) if start <= s.session_date <= end]
        return sorted(rows, key=lambda s: (s.session_date, s.start_time, s.session_id))


class FakeEnrollmentRepo:
    def __init__(self, db: Db):
        self._db = db

    def get_by_id(self, request_id):
        return self._db.enrollments.get(int(request_id))

    def find_open(self, *, student_id, class_id):
        for e in self._db.enrollments.values():
            if (
                e.student_id == student_id
                and e.class_id == class_id
                and e.status in (EnrollmentStatus.PENDING, EnrollmentStatus.APPROVED)
            ):
                return e
        return None

    def create(self, *, student_id, class_id, requested_at):
        if self.find_open(student_id=student_id, class_id=class_id):
            raise ConflictError("Bạn đã có yêu cầu cho lớp này")
        rid = self._db.next_id()
        self._db.enrollments[rid] = EnrollmentRequest(
            request_id=rid,
            student_id=student_id,
            class_id=class_id,
            status=EnrollmentStatus.PENDING,
            requested_at=requested_at,
        )
        return rid

    def decide(self, *, request_id, status, reviewed_by, reviewed_at, rejection_reason=None):
        e = self._db.enrollments.get(int(request_id))
        if not e or e.status != EnrollmentStatus.PENDING:
            return False
        self._db.enrollments[e.request_id] = replace(
            e,
            status=status,
            reviewed_by=reviewed_by,
            reviewed_at=reviewed_at,
            rejection_reason=rejection_reason,
        )
        return True

    def _row(self, e: EnrollmentRequest) -> EnrollmentRequestRow:
        s = self._db.students[e.student_id]
        c = self._db.classes[e.class_id]
        return EnrollmentRequestRow(
            request_id=e.request_id,
            student_id=e.student_id,
            student_code=s.student_code,
            student_name=s.full_name,
            class_id=e.class_id,
            class_code=c.code,
            class_name=c.name,
            status=e.status,
            requested_at=e.requested_at,
            reviewed_by=e.reviewed_by,
            reviewed_at=e.reviewed_at,
            rejection_reason=e.rejection_reason,
            avatar_url=s.avatar_url,
        )

    def list_rows(self, *, student_id=None, class_id=None, status=None, oldest_first=False, limit=500):
        rows = [
            e
            for e in self._db.enrollments.values()
            if (student_id is None or e.student_id == student_id)
            and (class_id is None or e.class_id == class_id)
            and (status is None or e.status == status)
        ]
        rows.sort(key=lambda e: (e.requested_at, e.request_id), reverse=not oldest_first)
        return [self._row(e) for e in rows[:limit]]

    def list_approved(self, *, class_ids):
        rows = [
            self._row(e)
            for e in self._db.enrollments.values()
            if e.status == EnrollmentStatus.APPROVED and e.class_id in class_ids
        ]
        return sorted(rows, key=lambda r: r.student_code)

    def count_by_status(self, *, class_id):
        out: dict[EnrollmentStatus, int] = {}
        for e in self._db.enrollments.values():
            if e.class_id == class_id:
                out[e.status] = out.get(e.status, 0) + 1
        return out


class FakeRegistrationRepo:
    def __init__(self, db: Db):
        self._db = db

    def get(self, *, student_id, session_id):
        for r in self._db.registrations.values():
            if r.student_id == student_id and r.session_id == session_id:
                return r
        return None

    def _current(self, r):
        s = self._db.sessions.get(r.session_id)
        return replace(r, session_date=s.session_date) if s else r

    def find_on_date(self, *, student_id, session_date):
        for r in self._db.registrations.values():
            r = self._current(r)
            if r.student_id == student_id and r.session_date == session_date:
                return r
        return None

    def create(self, *, student_id, session_id, session_date, registered_at):
        if self.get(student_id=student_id, session_id=session_id) or self.find_on_date(
            student_id=student_id, session_date=session_date
        ):
            raise ConflictError("Bạn đã đăng ký ca học này rồi")
        rid = self._db.next_id()
        self._db.registrations[rid] = SessionRegistration(
            registration_id=rid,
            student_id=student_id,
            session_id=session_id,
            session_date=session_date,
            registered_at=registered_at,
        )
        return rid

    def list_for_student(self, student_id):
        rows = [r for r in self._db.registrations.values() if r.student_id == student_id]
        return sorted(rows, key=lambda r: r.session_date, reverse=True)


class FakeAttendanceRepo:
    def __init__(self, db: Db):
        self._db = db

    def get_for_pair(self, *, student_id, session_id):
        for r in self._db.attendance.values():
            if r.student_id == student_id and r.session_id == session_id:
                return r
        return None

    def upsert_checkin(self, *, student_id, session_id, check_in_time, lat, lng, face_score, image_url, status, location_note):
        existing = self.get_for_pair(student_id=student_id, session_id=session_id)
        if existing and existing.is_checked_out:
            return existing
        fields = dict(
            check_in_time=check_in_time,
            check_in_lat=lat,
            check_in_lng=lng,
            check_in_face_score=face_score,
            check_in_image_url=image_url,
            status=status,
            location_note=location_note,
        )
        if existing:
            record = replace(existing, **fields)
        else:
            record = AttendanceRecord(
                attendance_id=self._db.next_id(), student_id=student_id, session_id=session_id, **fields
            )
        self._db.attendance[record.attendance_id] = record
        return record

    def mark_checkout(self, *, attendance_id, check_out_time, lat, lng, face_score, image_url):
        r = self._db.attendance.get(int(attendance_id))
        if not r or r.is_checked_out:
            return False
        self._db.attendance[r.attendance_id] = replace(
            r,
            check_out_time=check_out_time,
            check_out_lat=lat,
            check_out_lng=lng,
            check_out_face_score=face_score,
            check_out_image_url=image_url,
        )
        return True

    def list_rows(
        self,
        *,
        session_date=None,
        session_id=None,
        class_id=None,
        student_id=None,
        start=None,
        end=None,
        active_sessions_only=False,
        limit=None,
    ):
        out = []
        for r in self._db.attendance.values():
            s = self._db.sessions[r.session_id]
            st = self._db.students[r.student_id]
            if session_date is not None and s.session_date != session_date:
                continue
            if session_id is not None and r.session_id != session_id:
                continue
            if class_id is not None and s.class_id != class_id:
                continue
            if student_id is not None and r.student_id != student_id:
                continue
            if start is not None and s.session_date < start:
                continue
            if end is not None and s.session_date > end:
                continue
            if active_sessions_only and s.is_deleted:
                continue
            out.append(
                AttendanceRow(
                    attendance_id=r.attendance_id,
                    student_id=r.student_id,
                    student_code=st.student_code,
                    full_name=st.full_name,
                    session_id=r.session_id,
                    class_id=s.class_id,
                    session_date=s.session_date,
                    session_name=s.name,
                    start_time=s.start_time,
                    end_time=s.end_time,
                    status=r.status,
                    check_in_time=r.check_in_time,
                    check_in_lat=r.check_in_lat,
                    check_in_lng=r.check_in_lng,
                    check_in_face_score=r.check_in_face_score,
                    check_out_time=r.check_out_time,
                    check_out_lat=r.check_out_lat,
                    check_out_lng=r.check_out_lng,
                    check_out_face_score=r.check_out_face_score,
                    location_note=r.location_note,
                    avatar_url=st.avatar_url,
                )
            )
        out.sort(key=lambda row: (row.check_in_time or datetime.min, row.attendance_id), reverse=True)
        return out[:limit] if limit is not None else out

    def list_for_sessions(self, session_ids):
        ids = set(session_ids)
        return [r for r in self._db.attendance.values() if r.session_id in ids]


class FakeFaceMatcher:
    def __init__(self, *, matched: bool = True, score: float = 0.92):
        self.matched = matched
        self.score = score
        self.calls: list[tuple[str, str]] = []

    def compare(self, reference_url, captured_url):
        self.calls.append((reference_url, captured_url))
        return FaceMatchResult(matched=self.matched, score=self.score)


class FakeImageStore:
    def __init__(self):
        self.uploads: list[tuple[str, str]] = []

    def upload(self, image_base64, folder):
        self.uploads.append((folder, image_base64))
        return f"http://img/{folder}/{len(self.uploads)}.jpg"


@dataclass
class World:
    db: Db
    clock: FakeClock
    matcher: FakeFaceMatcher
    images: FakeImageStore
    container: Container


def build_world(*, now: datetime, late_counts_as_present: bool = False, distance_fn=None) -> World:
    db = Db()
    clock = FakeClock(now)
    matcher = FakeFaceMatcher()
    images = FakeImageStore()
    extra = {"distance_fn": distance_fn} if distance_fn else {}
    container = wire_services(
        classes_repo=FakeClassRepo(db),
        students_repo=FakeStudentRepo(db),
        sessions_repo=FakeSessionRepo(db),
        enrollments_repo=FakeEnrollmentRepo(db),
        registrations_repo=FakeRegistrationRepo(db),
        attendance_repo=FakeAttendanceRepo(db),
        face_matcher=matcher,
        image_store=images,
        clock=clock,
        late_counts_as_present=late_counts_as_present,
        **extra,
    )
    return World(db=db, clock=clock, matcher=matcher, images=images, container=container)
