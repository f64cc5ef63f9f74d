from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import AttendanceStatus
from ..core.exceptions import StoreError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord, AttendanceReportRow
from .repository import AttendanceRepository
from .status import derive_status

_RECORD_COLUMNS = "attendance_id, user_id, work_date, sign_in_time, sign_out_time, note"


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        sign_in_time=r.get("sign_in_time"),
        sign_out_time=r.get("sign_out_time"),
        note=r.get("note"),
    )


def upsert_day_in_cursor(
    cur,
    *,
    user_id: int,
    work_date: date,
    sign_in_time: datetime,
    sign_out_time: Optional[datetime],
) -> int:
    """Insert or merge the (user, day) record inside the caller's transaction.

    An existing sign-out is kept when ``sign_out_time`` is None.
    """
    cur.execute(
        f"""
        SELECT {_RECORD_COLUMNS}
        FROM attendance_records
        WHERE user_id=%s AND work_date=%s
        FOR UPDATE
        """,
        (int(user_id), work_date),
    )
    existing = fetchone(cur)
    if not existing:
        cur.execute(
            """
            INSERT INTO attendance_records(user_id, work_date, sign_in_time, sign_out_time, status)
            VALUES(%s,%s,%s,%s,%s)
            """,
            (int(user_id), work_date, sign_in_time, sign_out_time, derive_status(sign_in_time, sign_out_time).value),
        )
        return int(cur.lastrowid)

    merged_out = sign_out_time if sign_out_time is not None else existing.get("sign_out_time")
    cur.execute(
        """
        UPDATE attendance_records
        SET sign_in_time=%s, sign_out_time=%s, status=%s
        WHERE attendance_id=%s
        """,
        (sign_in_time, merged_out, derive_status(sign_in_time, merged_out).value, int(existing["attendance_id"])),
    )
    return int(existing["attendance_id"])


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_RECORD_COLUMNS} FROM attendance_records WHERE attendance_id=%s",
                (int(attendance_id),),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND work_date=%s
                """,
                (int(user_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_user(self, user_id: int, limit: Optional[int] = None) -> Sequence[AttendanceRecord]:
        sql = f"""
            SELECT {_RECORD_COLUMNS}
            FROM attendance_records
            WHERE user_id=%s
            ORDER BY work_date DESC, sign_in_time DESC
        """
        params: list[object] = [int(user_id)]
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_record(r) for r in fetchall(cur)]

    def list_all(self, limit: Optional[int] = None) -> Sequence[AttendanceRecord]:
        sql = f"""
            SELECT {_RECORD_COLUMNS}
            FROM attendance_records
            ORDER BY work_date DESC, sign_in_time DESC
        """
        params: tuple = ()
        if limit is not None:
            sql += " LIMIT %s"
            params = (int(limit),)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [_to_record(r) for r in fetchall(cur)]

    def list_signed_in_dates(self, user_id: int, *, start_date: date, end_date: date) -> set[date]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT work_date
                FROM attendance_records
                WHERE user_id=%s AND work_date BETWEEN %s AND %s AND sign_in_time IS NOT NULL
                """,
                (int(user_id), start_date, end_date),
            )
            return {r["work_date"] for r in fetchall(cur)}

    def create_sign_in(self, *, user_id: int, work_date: date, sign_in_time: datetime) -> Optional[int]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(user_id, work_date, sign_in_time, status)
                    VALUES(%s,%s,%s,%s)
                    """,
                    (int(user_id), work_date, sign_in_time, derive_status(sign_in_time, None).value),
                )
                return int(cur.lastrowid)
        except StoreError as e:
            # uq_attendance_user_day: another writer created the day first.
            if isinstance(e.__cause__, mysql.connector.IntegrityError) and e.__cause__.errno == errorcode.ER_DUP_ENTRY:
                return None
            raise

    def fill_sign_in(self, *, attendance_id: int, sign_in_time: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET sign_in_time=%s, sign_out_time=NULL, status=%s
                WHERE attendance_id=%s AND sign_in_time IS NULL
                """,
                (sign_in_time, AttendanceStatus.PARTIAL.value, int(attendance_id)),
            )
            return cur.rowcount > 0

    def record_sign_out(self, *, attendance_id: int, sign_out_time: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET sign_out_time=%s, status=%s
                WHERE attendance_id=%s AND sign_in_time IS NOT NULL AND sign_out_time IS NULL
                """,
                (sign_out_time, AttendanceStatus.PRESENT.value, int(attendance_id)),
            )
            return cur.rowcount > 0

    def upsert_day(
        self,
        *,
        user_id: int,
        work_date: date,
        sign_in_time: datetime,
        sign_out_time: Optional[datetime],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return upsert_day_in_cursor(
                cur,
                user_id=user_id,
                work_date=work_date,
                sign_in_time=sign_in_time,
                sign_out_time=sign_out_time,
            )

    def admin_update_record(
        self,
        *,
        attendance_id: int,
        sign_in_time: Optional[datetime],
        sign_out_time: Optional[datetime],
        note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET sign_in_time=%s, sign_out_time=%s, status=%s, note=%s
                WHERE attendance_id=%s
                """,
                (
                    sign_in_time,
                    sign_out_time,
                    derive_status(sign_in_time, sign_out_time).value,
                    note,
                    int(attendance_id),
                ),
            )
            return cur.rowcount > 0

    def get_report_rows(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        user_id: Optional[int] = None,
    ) -> Sequence[AttendanceReportRow]:
        clauses = ["1=1"]
        params: list[object] = []

        if start_date is not None:
            clauses.append("ar.work_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("ar.work_date <= %s")
            params.append(end_date)
        if user_id is not None:
            clauses.append("ar.user_id=%s")
            params.append(int(user_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    ar.attendance_id, ar.user_id, p.name, p.intern_id,
                    ar.work_date, ar.sign_in_time, ar.sign_out_time, ar.note
                FROM attendance_records ar
                JOIN profiles p ON p.user_id = ar.user_id
                WHERE {where}
                ORDER BY ar.work_date DESC, ar.sign_in_time DESC
                """,
                tuple(params),
            )
            return [
                AttendanceReportRow(
                    attendance_id=int(r["attendance_id"]),
                    user_id=int(r["user_id"]),
                    name=r["name"],
                    intern_id=r.get("intern_id"),
                    work_date=r["work_date"],
                    sign_in_time=r.get("sign_in_time"),
                    sign_out_time=r.get("sign_out_time"),
                    note=r.get("note"),
                )
                for r in fetchall(cur)
            ]
