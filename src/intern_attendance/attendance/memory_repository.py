from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from .model import AttendanceRecord, AttendanceReportRow
from .repository import AttendanceRepository


def _newest_first(records):
    return sorted(
        records,
        key=lambda r: (r.work_date, r.sign_in_time or datetime.min),
        reverse=True,
    )


class InMemoryAttendanceRepository(AttendanceRepository):
    """Process-local ledger for tests and demo runs.

    Guarded writes take ``lock`` so their condition and mutation apply as one
    step, mirroring the conditional SQL of the MySQL repository.
    """

    def __init__(self, profile_lookup: Optional[Callable[[int], object]] = None):
        self.lock = threading.RLock()
        self._by_id: dict[int, AttendanceRecord] = {}
        self._id_by_user_date: dict[tuple[int, date], int] = {}
        self._next_id = 0
        self._profile_lookup = profile_lookup

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self._by_id.get(int(attendance_id))

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        rid = self._id_by_user_date.get((int(user_id), work_date))
        return self._by_id.get(rid) if rid is not None else None

    def list_for_user(self, user_id: int, limit: Optional[int] = None) -> Sequence[AttendanceRecord]:
        items = _newest_first(r for r in self._by_id.values() if r.user_id == int(user_id))
        return items if limit is None else items[: int(limit)]

    def list_all(self, limit: Optional[int] = None) -> Sequence[AttendanceRecord]:
        items = _newest_first(self._by_id.values())
        return items if limit is None else items[: int(limit)]

    def list_signed_in_dates(self, user_id: int, *, start_date: date, end_date: date) -> set[date]:
        return {
            r.work_date
            for r in self._by_id.values()
            if r.user_id == int(user_id) and start_date <= r.work_date <= end_date and r.sign_in_time is not None
        }

    def _insert(self, record: AttendanceRecord) -> int:
        self._next_id += 1
        record = replace(record, attendance_id=self._next_id)
        self._by_id[record.attendance_id] = record
        self._id_by_user_date[(record.user_id, record.work_date)] = record.attendance_id
        return record.attendance_id

    def create_sign_in(self, *, user_id: int, work_date: date, sign_in_time: datetime) -> Optional[int]:
        with self.lock:
            if (int(user_id), work_date) in self._id_by_user_date:
                return None
            return self._insert(
                AttendanceRecord(
                    attendance_id=0,
                    user_id=int(user_id),
                    work_date=work_date,
                    sign_in_time=sign_in_time,
                    sign_out_time=None,
                )
            )

    def fill_sign_in(self, *, attendance_id: int, sign_in_time: datetime) -> bool:
        with self.lock:
            rec = self._by_id.get(int(attendance_id))
            if not rec or rec.sign_in_time is not None:
                return False
            self._by_id[rec.attendance_id] = replace(rec, sign_in_time=sign_in_time, sign_out_time=None)
            return True

    def record_sign_out(self, *, attendance_id: int, sign_out_time: datetime) -> bool:
        with self.lock:
            rec = self._by_id.get(int(attendance_id))
            if not rec or rec.sign_in_time is None or rec.sign_out_time is not None:
                return False
            self._by_id[rec.attendance_id] = replace(rec, sign_out_time=sign_out_time)
            return True

    def upsert_day(
        self,
        *,
        user_id: int,
        work_date: date,
        sign_in_time: datetime,
        sign_out_time: Optional[datetime],
    ) -> int:
        with self.lock:
            existing = self.get_for_user_and_date(user_id, work_date)
            if not existing:
                return self._insert(
                    AttendanceRecord(
                        attendance_id=0,
                        user_id=int(user_id),
                        work_date=work_date,
                        sign_in_time=sign_in_time,
                        sign_out_time=sign_out_time,
                    )
                )
            merged_out = sign_out_time if sign_out_time is not None else existing.sign_out_time
            self._by_id[existing.attendance_id] = replace(
                existing, sign_in_time=sign_in_time, sign_out_time=merged_out
            )
            return existing.attendance_id

    def admin_update_record(
        self,
        *,
        attendance_id: int,
        sign_in_time: Optional[datetime],
        sign_out_time: Optional[datetime],
        note: Optional[str] = None,
    ) -> bool:
        with self.lock:
            rec = self._by_id.get(int(attendance_id))
            if not rec:
                return False
            self._by_id[rec.attendance_id] = replace(
                rec, sign_in_time=sign_in_time, sign_out_time=sign_out_time, note=note
            )
            return True

    def get_report_rows(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        user_id: Optional[int] = None,
    ) -> Sequence[AttendanceReportRow]:
        rows: list[AttendanceReportRow] = []
        for r in self.list_all():
            if start_date is not None and r.work_date < start_date:
                continue
            if end_date is not None and r.work_date > end_date:
                continue
            if user_id is not None and r.user_id != int(user_id):
                continue

            profile = self._profile_lookup(r.user_id) if self._profile_lookup else None
            rows.append(
                AttendanceReportRow(
                    attendance_id=r.attendance_id,
                    user_id=r.user_id,
                    name=getattr(profile, "name", None) or "Unknown",
                    intern_id=getattr(profile, "intern_id", None),
                    work_date=r.work_date,
                    sign_in_time=r.sign_in_time,
                    sign_out_time=r.sign_out_time,
                    note=r.note,
                )
            )
        return rows
