from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .approvals.memory_repository import InMemoryPendingSignInRepository
from .approvals.mysql_pending_repository import MySQLPendingSignInRepository
from .approvals.repository import PendingSignInRepository
from .approvals.service import SignInRequestService
from .attendance.memory_repository import InMemoryAttendanceRepository
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_MISSED_DAYS_WINDOW
from .core.enums import StorageBackend, Workflow
from .database.connection import DBConfig, DatabaseConnection
from .profiles.memory_repository import InMemoryProfileRepository
from .profiles.mysql_profile_repository import MySQLProfileRepository
from .profiles.repository import ProfileRepository
from .profiles.service import AuthService, ProfileService
from .reports.service import AttendanceReportService


@dataclass(frozen=True)
class Container:
    workflow: Workflow

    profiles_repo: ProfileRepository
    attendance_repo: AttendanceRepository
    requests_repo: PendingSignInRepository

    auth_service: AuthService
    profile_service: ProfileService
    attendance_service: AttendanceService
    request_service: SignInRequestService
    report_service: AttendanceReportService


def build_container(
    *,
    db_config: Optional[dict] = None,
    storage: StorageBackend = StorageBackend.MYSQL,
    workflow: Workflow = Workflow.DIRECT,
    missed_days_window: int = DEFAULT_MISSED_DAYS_WINDOW,
) -> Container:
    if storage == StorageBackend.MEMORY:
        profiles_repo = InMemoryProfileRepository()
        attendance_repo = InMemoryAttendanceRepository(profile_lookup=profiles_repo.get_by_id)
        requests_repo = InMemoryPendingSignInRepository(attendance_repo)
    else:
        if db_config is None:
            raise ValueError("db_config is required for the mysql storage backend")
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
        profiles_repo = MySQLProfileRepository(conn)
        attendance_repo = MySQLAttendanceRepository(conn)
        requests_repo = MySQLPendingSignInRepository(conn)

    attendance_service = AttendanceService(
        attendance_repo,
        profiles_repo,
        missed_days_window=missed_days_window,
    )

    return Container(
        workflow=workflow,
        profiles_repo=profiles_repo,
        attendance_repo=attendance_repo,
        requests_repo=requests_repo,
        auth_service=AuthService(profiles_repo),
        profile_service=ProfileService(profiles_repo),
        attendance_service=attendance_service,
        request_service=SignInRequestService(requests_repo, attendance_repo, profiles_repo),
        report_service=AttendanceReportService(attendance_repo, profiles_repo, attendance_service),
    )
