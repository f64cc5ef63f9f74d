from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus
from .status import derive_status


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one user's attendance for one calendar day."""

    attendance_id: int
    user_id: int
    work_date: date
    sign_in_time: Optional[datetime]
    sign_out_time: Optional[datetime]
    note: Optional[str] = None

    @property
    def status(self) -> AttendanceStatus:
        return derive_status(self.sign_in_time, self.sign_out_time)


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for admin listings and exports (record joined with profile)."""

    attendance_id: int
    user_id: int
    name: str
    intern_id: Optional[str]
    work_date: date
    sign_in_time: Optional[datetime]
    sign_out_time: Optional[datetime]
    note: Optional[str] = None

    @property
    def status(self) -> AttendanceStatus:
        return derive_status(self.sign_in_time, self.sign_out_time)
