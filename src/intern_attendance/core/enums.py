from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    INTERN = "intern"
    ADMIN = "admin"
    HR = "hr"


class AttendanceStatus(str, Enum):
    """Derived status of a single user-day."""

    PRESENT = "present"
    PARTIAL = "partial"
    ABSENT = "absent"


class RequestStatus(str, Enum):
    """Review state of a sign-in/out request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Workflow(str, Enum):
    """Which attendance workflow is the system of record."""

    DIRECT = "direct"
    APPROVAL = "approval"


class StorageBackend(str, Enum):
    MYSQL = "mysql"
    MEMORY = "memory"
