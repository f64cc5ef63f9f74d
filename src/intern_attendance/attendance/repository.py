from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, AttendanceReportRow


class AttendanceRepository(Protocol):
    """Storage interface for the attendance ledger.

    Writes that guard a transition (``create_sign_in``, ``record_sign_out``)
    must apply their condition atomically in the backing store.
    """

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_user(self, user_id: int, limit: Optional[int] = None) -> Sequence[AttendanceRecord]:
        """Newest first."""

        raise NotImplementedError

    def list_all(self, limit: Optional[int] = None) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_signed_in_dates(self, user_id: int, *, start_date: date, end_date: date) -> set[date]:
        """Dates in [start_date, end_date] having a record with a non-null sign-in."""

        raise NotImplementedError

    def create_sign_in(self, *, user_id: int, work_date: date, sign_in_time: datetime) -> Optional[int]:
        """Insert the day's record; ``None`` when one already exists for (user, day)."""

        raise NotImplementedError

    def fill_sign_in(self, *, attendance_id: int, sign_in_time: datetime) -> bool:
        """Set sign-in on an existing record only where it is still empty."""

        raise NotImplementedError

    def record_sign_out(self, *, attendance_id: int, sign_out_time: datetime) -> bool:
        """Set sign-out only where it is still empty."""

        raise NotImplementedError

    def upsert_day(
        self,
        *,
        user_id: int,
        work_date: date,
        sign_in_time: datetime,
        sign_out_time: Optional[datetime],
    ) -> int:
        raise NotImplementedError

    def admin_update_record(
        self,
        *,
        attendance_id: int,
        sign_in_time: Optional[datetime],
        sign_out_time: Optional[datetime],
        note: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def get_report_rows(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        user_id: Optional[int] = None,
    ) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError
