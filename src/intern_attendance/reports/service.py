from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from ..attendance.model import AttendanceReportRow
from ..attendance.repository import AttendanceRepository
from ..attendance.service import AttendanceService
from ..common.datetime_utils import format_clock
from ..core.constants import CSV_MISSING_VALUE, HIGH_ABSENCE_THRESHOLD
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import ValidationError
from ..profiles.repository import ProfileRepository

CSV_COLUMNS = ["Name", "InternID", "Date", "SignInTime", "SignOutTime", "Status"]


@dataclass(frozen=True)
class DashboardStats:
    total_interns: int
    signed_in_today: int
    absent_today: int
    pending_requests: Optional[int] = None

    def as_dict(self) -> dict:
        out = {
            "total_interns": self.total_interns,
            "signed_in_today": self.signed_in_today,
            "absent_today": self.absent_today,
        }
        if self.pending_requests is not None:
            out["pending_requests"] = self.pending_requests
        return out


class AttendanceReportService:
    """Admin read-side: counters, filtered listings, intern summaries, CSV."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        profiles: ProfileRepository,
        attendance_service: AttendanceService,
    ):
        self._attendance = attendance
        self._profiles = profiles
        self._attendance_service = attendance_service

    def build_dashboard(self, *, today: date, pending_requests: Optional[int] = None) -> DashboardStats:
        interns = {p.user_id for p in self._profiles.list_by_role(Role.INTERN)}
        today_rows = self._attendance.get_report_rows(start_date=today, end_date=today)
        signed_in = sum(1 for r in today_rows if r.user_id in interns and r.sign_in_time is not None)
        return DashboardStats(
            total_interns=len(interns),
            signed_in_today=signed_in,
            absent_today=max(len(interns) - signed_in, 0),
            pending_requests=pending_requests,
        )

    def filter_records(
        self,
        *,
        search: str = "",
        status: str = "all",
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[AttendanceReportRow]:
        status = (status or "all").strip().lower()
        if status != "all":
            try:
                wanted: Optional[AttendanceStatus] = AttendanceStatus(status)
            except ValueError:
                raise ValidationError(f"Unknown status filter: {status}")
        else:
            wanted = None

        needle = (search or "").strip().lower()
        out: list[AttendanceReportRow] = []
        for r in self._attendance.get_report_rows(start_date=start, end_date=end):
            if needle and needle not in r.name.lower() and needle not in (r.intern_id or "").lower():
                continue
            if wanted is not None and r.status != wanted:
                continue
            out.append(r)
        return out

    @staticmethod
    def to_ui(rows: Sequence[AttendanceReportRow]) -> list[dict]:
        return [
            {
                "id": r.attendance_id,
                "user_id": r.user_id,
                "name": r.name,
                "intern_id": r.intern_id or "",
                "date": r.work_date.strftime("%Y-%m-%d"),
                "sign_in": format_clock(r.sign_in_time),
                "sign_out": format_clock(r.sign_out_time),
                "status": r.status.value,
                "note": r.note or "",
            }
            for r in rows
        ]

    def intern_summaries(self, *, as_of: date, window_size: Optional[int] = None) -> list[dict]:
        summaries = []
        for intern in self._profiles.list_by_role(Role.INTERN):
            missed = self._attendance_service.compute_missed_days(
                intern.user_id, as_of=as_of, window_size=window_size
            )
            scanned = window_size if window_size is not None else self._attendance_service.missed_days_window
            rate = round((scanned - len(missed)) / scanned * 100) if scanned else 0
            summaries.append(
                {
                    "user_id": intern.user_id,
                    "name": intern.name,
                    "email": intern.email,
                    "intern_id": intern.intern_id or "",
                    "missed_days": len(missed),
                    "weekdays_scanned": scanned,
                    "attendance_rate": rate,
                    "high_absences": len(missed) >= HIGH_ABSENCE_THRESHOLD,
                }
            )
        return summaries

    @staticmethod
    def export_csv(rows: Sequence[AttendanceReportRow]) -> str:
        """Render rows as CSV; the csv module quotes embedded commas and quotes."""
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=CSV_COLUMNS, lineterminator="\n")
        writer.writeheader()
        for r in rows:
            writer.writerow(
                {
                    "Name": r.name or "Unknown",
                    "InternID": r.intern_id or "Unknown",
                    "Date": r.work_date.strftime("%Y-%m-%d"),
                    "SignInTime": format_clock(r.sign_in_time, CSV_MISSING_VALUE),
                    "SignOutTime": format_clock(r.sign_out_time, CSV_MISSING_VALUE),
                    "Status": r.status.value,
                }
            )
        return out.getvalue()

    @staticmethod
    def csv_filename(today: date) -> str:
        return f"attendance-report-{today.strftime('%Y-%m-%d')}.csv"
