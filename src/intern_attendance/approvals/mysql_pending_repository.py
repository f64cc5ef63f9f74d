from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable, Dict, Optional, Sequence

from ..attendance.mysql_attendance_repository import upsert_day_in_cursor
from ..common.datetime_utils import now_local
from ..core.enums import RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import PendingSignIn
from .repository import PendingSignInRepository

_REQUEST_COLUMNS = (
    "request_id, user_id, work_date, sign_in_time, sign_out_time, "
    "status, created_at, decided_by, decided_at, admin_note"
)


def _to_request(r: Dict[str, Any]) -> PendingSignIn:
    return PendingSignIn(
        request_id=int(r["request_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        sign_in_time=r["sign_in_time"],
        sign_out_time=r.get("sign_out_time"),
        status=RequestStatus(r["status"]),
        created_at=r["created_at"],
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
        admin_note=r.get("admin_note"),
    )


class MySQLPendingSignInRepository(PendingSignInRepository):
    """Request timestamps come from ``clock`` (operating local time), not the server."""

    def __init__(self, conn_factory: DatabaseConnection, *, clock: Callable[[], datetime] = now_local):
        self._conn_factory = conn_factory
        self._clock = clock

    def get_by_id(self, request_id: int) -> Optional[PendingSignIn]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_REQUEST_COLUMNS} FROM pending_sign_ins WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def get_open_for_user_and_date(self, user_id: int, work_date: date) -> Optional[PendingSignIn]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_REQUEST_COLUMNS}
                FROM pending_sign_ins
                WHERE user_id=%s AND work_date=%s AND status=%s
                ORDER BY created_at DESC
                LIMIT 1
                """,
                (int(user_id), work_date, RequestStatus.PENDING.value),
            )
            r = fetchone(cur)
            return _to_request(r) if r else None

    def create_pending(
        self,
        *,
        user_id: int,
        work_date: date,
        sign_in_time: datetime,
        sign_out_time: Optional[datetime] = None,
    ) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            # Conditional insert keeps at most one open request per user per day.
            cur.execute(
                """
                INSERT INTO pending_sign_ins(user_id, work_date, sign_in_time, sign_out_time, status, created_at)
                SELECT %s, %s, %s, %s, %s, %s FROM DUAL
                WHERE NOT EXISTS (
                    SELECT 1 FROM pending_sign_ins
                    WHERE user_id=%s AND work_date=%s AND status=%s
                )
                """,
                (
                    int(user_id),
                    work_date,
                    sign_in_time,
                    sign_out_time,
                    RequestStatus.PENDING.value,
                    self._clock(),
                    int(user_id),
                    work_date,
                    RequestStatus.PENDING.value,
                ),
            )
            if cur.rowcount <= 0:
                return None
            return int(cur.lastrowid)

    def attach_sign_out(self, *, request_id: int, sign_out_time: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE pending_sign_ins
                SET sign_out_time=%s
                WHERE request_id=%s AND status=%s AND sign_out_time IS NULL
                """,
                (sign_out_time, int(request_id), RequestStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def approve(self, *, request_id: int, decided_by: int) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_REQUEST_COLUMNS} FROM pending_sign_ins WHERE request_id=%s FOR UPDATE",
                (int(request_id),),
            )
            r = fetchone(cur)
            if not r or r["status"] != RequestStatus.PENDING.value:
                return None

            req = _to_request(r)
            cur.execute(
                """
                UPDATE pending_sign_ins
                SET status=%s, decided_by=%s, decided_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    RequestStatus.APPROVED.value,
                    int(decided_by),
                    self._clock(),
                    req.request_id,
                    RequestStatus.PENDING.value,
                ),
            )
            return upsert_day_in_cursor(
                cur,
                user_id=req.user_id,
                work_date=req.work_date,
                sign_in_time=req.sign_in_time,
                sign_out_time=req.sign_out_time,
            )

    def reject(self, *, request_id: int, decided_by: int, admin_note: Optional[str] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE pending_sign_ins
                SET status=%s, decided_by=%s, decided_at=%s, admin_note=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    RequestStatus.REJECTED.value,
                    int(decided_by),
                    self._clock(),
                    admin_note,
                    int(request_id),
                    RequestStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        user_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[PendingSignIn]:
        clauses = ["1=1"]
        params: list[object] = []

        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(user_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_REQUEST_COLUMNS}
                FROM pending_sign_ins
                WHERE {where}
                ORDER BY created_at DESC, request_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def count_requests(self, *, status: Optional[RequestStatus] = None) -> int:
        sql = "SELECT COUNT(*) AS n FROM pending_sign_ins"
        params: tuple = ()
        if status is not None:
            sql += " WHERE status=%s"
            params = (status.value,)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            r = fetchone(cur)
            return int(r["n"]) if r else 0
