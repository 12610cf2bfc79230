from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.location import DistanceFn, haversine_meters
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .classes.mysql_class_repository import MySQLClassRepository
from .classes.repository import ClassRepository
from .classes.service import ClassService
from .common.datetime_utils import Clock, now_local
from .core.constants import FACE_MATCH_THRESHOLD, LATE_WINDOW_MINUTES
from .database.connection import DatabaseConnection
from .enrollments.mysql_enrollment_repository import MySQLEnrollmentRepository
from .enrollments.repository import EnrollmentRepository
from .enrollments.service import EnrollmentService
from .faces.client import FaceMatcher, HttpFaceMatcher
from .faces.image_store import ImageStore, LocalImageStore
from .faces.service import FaceService
from .registrations.mysql_registration_repository import MySQLRegistrationRepository
from .registrations.repository import RegistrationRepository
from .registrations.service import RegistrationService
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionService
from .statistics.service import StatisticsService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository


@dataclass(frozen=True)
class Container:
    clock: Clock

    classes_repo: ClassRepository
    students_repo: StudentRepository
    sessions_repo: SessionRepository
    enrollments_repo: EnrollmentRepository
    registrations_repo: RegistrationRepository
    attendance_repo: AttendanceRepository

    class_service: ClassService
    session_service: SessionService
    enrollment_service: EnrollmentService
    registration_service: RegistrationService
    face_service: FaceService
    attendance_service: AttendanceService
    statistics_service: StatisticsService

    conn: Optional[DatabaseConnection] = None


def wire_services(
    *,
    classes_repo: ClassRepository,
    students_repo: StudentRepository,
    sessions_repo: SessionRepository,
    enrollments_repo: EnrollmentRepository,
    registrations_repo: RegistrationRepository,
    attendance_repo: AttendanceRepository,
    face_matcher: FaceMatcher,
    image_store: ImageStore,
    clock: Clock = now_local,
    distance_fn: DistanceFn = haversine_meters,
    face_threshold: float = FACE_MATCH_THRESHOLD,
    late_window_minutes: int = LATE_WINDOW_MINUTES,
    late_counts_as_present: bool = False,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build every service on top of the given repositories and collaborators."""

    face_service = FaceService(students_repo, face_matcher, image_store, threshold=face_threshold)

    return Container(
        clock=clock,
        classes_repo=classes_repo,
        students_repo=students_repo,
        sessions_repo=sessions_repo,
        enrollments_repo=enrollments_repo,
        registrations_repo=registrations_repo,
        attendance_repo=attendance_repo,
        class_service=ClassService(classes_repo, enrollments_repo, clock=clock),
        session_service=SessionService(sessions_repo, classes_repo, clock=clock),
        enrollment_service=EnrollmentService(enrollments_repo, classes_repo, clock=clock),
        registration_service=RegistrationService(registrations_repo, sessions_repo, clock=clock),
        face_service=face_service,
        attendance_service=AttendanceService(
            attendance_repo,
            students_repo,
            sessions_repo,
            classes_repo,
            enrollments_repo,
            face_service,
            strategy_factory=AttendanceStrategyFactory(late_window_minutes=late_window_minutes),
            distance_fn=distance_fn,
            clock=clock,
        ),
        statistics_service=StatisticsService(
            sessions_repo,
            enrollments_repo,
            attendance_repo,
            classes_repo,
            clock=clock,
            late_counts_as_present=late_counts_as_present,
        ),
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    face_api_url: str,
    upload_dir: str,
    upload_base_url: str,
    face_api_timeout: float = 20.0,
    late_counts_as_present: bool = False,
) -> Container:
    conn = DatabaseConnection.from_settings(db_config)

    return wire_services(
        classes_repo=MySQLClassRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        enrollments_repo=MySQLEnrollmentRepository(conn),
        registrations_repo=MySQLRegistrationRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        face_matcher=HttpFaceMatcher(face_api_url, timeout=face_api_timeout),
        image_store=LocalImageStore(upload_dir, upload_base_url),
        late_counts_as_present=late_counts_as_present,
        conn=conn,
    )
