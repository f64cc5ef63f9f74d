from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..attendance.memory_repository import InMemoryAttendanceRepository
from ..common.datetime_utils import now_local
from ..core.enums import RequestStatus
from .model import PendingSignIn
from .repository import PendingSignInRepository


class InMemoryPendingSignInRepository(PendingSignInRepository):
    """Shares the attendance repository's lock so approval is one atomic step."""

    def __init__(self, attendance: InMemoryAttendanceRepository, *, clock: Callable[[], datetime] = now_local):
        self._attendance = attendance
        self._clock = clock
        self._by_id: dict[int, PendingSignIn] = {}
        self._next_id = 0

    def get_by_id(self, request_id: int) -> Optional[PendingSignIn]:
        return self._by_id.get(int(request_id))

    def get_open_for_user_and_date(self, user_id: int, work_date: date) -> Optional[PendingSignIn]:
        return next(
            (
                r
                for r in self._by_id.values()
                if r.user_id == int(user_id) and r.work_date == work_date and r.is_open
            ),
            None,
        )

    def create_pending(
        self,
        *,
        user_id: int,
        work_date: date,
        sign_in_time: datetime,
        sign_out_time: Optional[datetime] = None,
    ) -> Optional[int]:
        with self._attendance.lock:
            if self.get_open_for_user_and_date(user_id, work_date):
                return None
            self._next_id += 1
            self._by_id[self._next_id] = PendingSignIn(
                request_id=self._next_id,
                user_id=int(user_id),
                work_date=work_date,
                sign_in_time=sign_in_time,
                sign_out_time=sign_out_time,
                status=RequestStatus.PENDING,
                created_at=self._clock(),
            )
            return self._next_id

    def attach_sign_out(self, *, request_id: int, sign_out_time: datetime) -> bool:
        with self._attendance.lock:
            req = self._by_id.get(int(request_id))
            if not req or not req.is_open or req.sign_out_time is not None:
                return False
            self._by_id[req.request_id] = replace(req, sign_out_time=sign_out_time)
            return True

    def approve(self, *, request_id: int, decided_by: int) -> Optional[int]:
        with self._attendance.lock:
            req = self._by_id.get(int(request_id))
            if not req or not req.is_open:
                return None
            self._by_id[req.request_id] = replace(
                req,
                status=RequestStatus.APPROVED,
                decided_by=int(decided_by),
                decided_at=self._clock(),
            )
            return self._attendance.upsert_day(
                user_id=req.user_id,
                work_date=req.work_date,
                sign_in_time=req.sign_in_time,
                sign_out_time=req.sign_out_time,
            )

    def reject(self, *, request_id: int, decided_by: int, admin_note: Optional[str] = None) -> bool:
        with self._attendance.lock:
            req = self._by_id.get(int(request_id))
            if not req or not req.is_open:
                return False
            self._by_id[req.request_id] = replace(
                req,
                status=RequestStatus.REJECTED,
                decided_by=int(decided_by),
                decided_at=self._clock(),
                admin_note=admin_note,
            )
            return True

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        user_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[PendingSignIn]:
        items = [
            r
            for r in self._by_id.values()
            if (status is None or r.status == status) and (user_id is None or r.user_id == int(user_id))
        ]
        items.sort(key=lambda r: (r.created_at, r.request_id), reverse=True)
        return items[: int(limit)]

    def count_requests(self, *, status: Optional[RequestStatus] = None) -> int:
        return sum(1 for r in self._by_id.values() if status is None or r.status == status)
