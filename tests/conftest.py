from __future__ import annotations

from datetime import datetime

import pytest
from werkzeug.security import generate_password_hash

from intern_attendance.approvals.memory_repository import InMemoryPendingSignInRepository
from intern_attendance.approvals.service import SignInRequestService
from intern_attendance.attendance.memory_repository import InMemoryAttendanceRepository
from intern_attendance.attendance.service import AttendanceService
from intern_attendance.core.enums import Role
from intern_attendance.profiles.memory_repository import InMemoryProfileRepository

# 2026-02-02 is a Monday.
MONDAY = datetime(2026, 2, 2, 8, 30)


@pytest.fixture
def fixed_now() -> datetime:
    return MONDAY


@pytest.fixture
def profiles_repo() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def attendance_repo(profiles_repo) -> InMemoryAttendanceRepository:
    return InMemoryAttendanceRepository(profile_lookup=profiles_repo.get_by_id)


@pytest.fixture
def requests_repo(attendance_repo) -> InMemoryPendingSignInRepository:
    return InMemoryPendingSignInRepository(attendance_repo, clock=lambda: MONDAY)


def _add_profile(repo, name, email, role=Role.INTERN, intern_id=None) -> int:
    return repo.create_profile(
        name=name,
        email=email,
        password_hash=generate_password_hash("secret123"),
        role=role,
        intern_id=intern_id,
        phone_number=None,
    )


@pytest.fixture
def intern_id(profiles_repo) -> int:
    return _add_profile(profiles_repo, "Adeolu Adebayo", "adeolu@example.com", intern_id="IIH001")


@pytest.fixture
def admin_id(profiles_repo) -> int:
    return _add_profile(profiles_repo, "Admin User", "admin@iih.ng", role=Role.ADMIN, intern_id="ADMIN001")


@pytest.fixture
def add_profile(profiles_repo):
    def _add(name, email, role=Role.INTERN, intern_id=None) -> int:
        return _add_profile(profiles_repo, name, email, role=role, intern_id=intern_id)

    return _add


@pytest.fixture
def attendance_service(attendance_repo, profiles_repo) -> AttendanceService:
    return AttendanceService(attendance_repo, profiles_repo)


@pytest.fixture
def request_service(requests_repo, attendance_repo, profiles_repo) -> SignInRequestService:
    return SignInRequestService(requests_repo, attendance_repo, profiles_repo)
