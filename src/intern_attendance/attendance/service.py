from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import format_clock, is_weekday, now_local, to_operating_time, weekdays_before
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_MISSED_DAYS_WINDOW
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..profiles.repository import ProfileRepository
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .status import validate_times

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    AttendanceStatus.PRESENT: "Present",
    AttendanceStatus.PARTIAL: "Partial",
    AttendanceStatus.ABSENT: "Absent",
}


def _to_naive_local(value: Optional[datetime]) -> Optional[datetime]:
    return to_operating_time(value) if value is not None else None


class AttendanceService:
    """Direct-write ledger: sign-in/out go straight into attendance records."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        profiles: ProfileRepository,
        *,
        missed_days_window: int = DEFAULT_MISSED_DAYS_WINDOW,
    ):
        self._attendance = attendance
        self._profiles = profiles
        self._missed_days_window = int(missed_days_window)

    @property
    def missed_days_window(self) -> int:
        return self._missed_days_window

    @staticmethod
    def _check_limit(limit: Optional[int]) -> Optional[int]:
        if limit is not None and int(limit) < 1:
            raise ValidationError("limit must be a positive integer")
        return limit

    def _require_user(self, user_id: int) -> None:
        if not self._profiles.get_by_id(int(user_id)):
            raise ValidationError("User does not exist")

    def sign_in(self, user_id: int, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = to_operating_time(now or now_local())
        today = now.date()

        if not is_weekday(today):
            raise ValidationError("Attendance can only be recorded on weekdays")
        self._require_user(user_id)

        existing = self._attendance.get_for_user_and_date(int(user_id), today)
        if existing and existing.sign_in_time is not None:
            raise ValidationError("You have already signed in today")

        if existing:
            # Admin-cleared placeholder; a concurrent sign-in makes this a no-op.
            ok = self._attendance.fill_sign_in(attendance_id=existing.attendance_id, sign_in_time=now)
            attendance_id = existing.attendance_id if ok else None
        else:
            attendance_id = self._attendance.create_sign_in(user_id=int(user_id), work_date=today, sign_in_time=now)

        if attendance_id is None:
            raise ValidationError("You have already signed in today")

        logger.info("Sign-in recorded user_id=%s date=%s", user_id, today)
        return self._attendance.get_by_id(attendance_id)

    def sign_out(self, user_id: int, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = to_operating_time(now or now_local())
        today = now.date()

        if not is_weekday(today):
            raise ValidationError("Attendance can only be recorded on weekdays")

        record = self._attendance.get_for_user_and_date(int(user_id), today)
        if not record or record.sign_in_time is None:
            raise ValidationError("You must sign in first")
        if record.sign_out_time is not None:
            raise ValidationError("You have already signed out today")
        validate_times(record.sign_in_time, now)

        # Conditional write: a concurrent sign-out makes this a no-op.
        if not self._attendance.record_sign_out(attendance_id=record.attendance_id, sign_out_time=now):
            raise ValidationError("You have already signed out today")

        logger.info("Sign-out recorded user_id=%s date=%s", user_id, today)
        return self._attendance.get_by_id(record.attendance_id)

    def get_today_record(self, user_id: int, *, now: Optional[datetime] = None) -> Optional[AttendanceRecord]:
        today = to_operating_time(now or now_local()).date()
        return self._attendance.get_for_user_and_date(int(user_id), today)

    def list_for_user(self, user_id: int, *, limit: Optional[int] = None) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_user(int(user_id), self._check_limit(limit))

    def list_all(self, *, limit: Optional[int] = None) -> Sequence[AttendanceRecord]:
        return self._attendance.list_all(self._check_limit(limit))

    def compute_missed_days(
        self,
        user_id: int,
        *,
        as_of: Optional[date] = None,
        window_size: Optional[int] = None,
    ) -> list[date]:
        """Weekdays before ``as_of`` with no signed-in record, most recent first.

        Scans ``window_size`` weekdays; ``as_of`` itself is never counted.
        """
        as_of = as_of or now_local().date()
        window = self._missed_days_window if window_size is None else int(window_size)
        scanned = list(weekdays_before(as_of, window))
        if not scanned:
            return []

        signed_in = self._attendance.list_signed_in_dates(
            int(user_id), start_date=scanned[-1], end_date=scanned[0]
        )
        return [d for d in scanned if d not in signed_in]

    def admin_update_record(
        self,
        *,
        current_role: Role,
        attendance_id: int,
        sign_in_time: Optional[datetime],
        sign_out_time: Optional[datetime],
        note: Optional[str] = None,
    ) -> AttendanceRecord:
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission to edit attendance")

        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise ValidationError("Attendance record not found")

        sign_in_time = _to_naive_local(sign_in_time)
        sign_out_time = _to_naive_local(sign_out_time)
        if sign_in_time is not None and sign_in_time.date() != record.work_date:
            raise ValidationError("Sign-in must fall on the record's date")
        validate_times(sign_in_time, sign_out_time)

        ok = self._attendance.admin_update_record(
            attendance_id=record.attendance_id,
            sign_in_time=sign_in_time,
            sign_out_time=sign_out_time,
            note=(note or "").strip() or None,
        )
        if not ok:
            raise ValidationError("Failed to update attendance record")

        logger.info("Admin edited attendance_id=%s", record.attendance_id)
        return self._attendance.get_by_id(record.attendance_id)

    def get_history_ui(self, user_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> list[dict]:
        return [self.to_ui(r) for r in self.list_for_user(user_id, limit=limit)]

    @staticmethod
    def to_ui(r: AttendanceRecord) -> dict:
        return {
            "id": r.attendance_id,
            "date": r.work_date.strftime("%Y-%m-%d"),
            "sign_in": format_clock(r.sign_in_time),
            "sign_out": format_clock(r.sign_out_time),
            "status": r.status.value,
            "status_label": STATUS_LABELS[r.status],
            "note": r.note or "",
        }
