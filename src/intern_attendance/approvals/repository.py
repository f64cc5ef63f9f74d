from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import PendingSignIn


class PendingSignInRepository(Protocol):
    def get_by_id(self, request_id: int) -> Optional[PendingSignIn]:
        raise NotImplementedError

    def get_open_for_user_and_date(self, user_id: int, work_date: date) -> Optional[PendingSignIn]:
        raise NotImplementedError

    def create_pending(
        self,
        *,
        user_id: int,
        work_date: date,
        sign_in_time: datetime,
        sign_out_time: Optional[datetime] = None,
    ) -> Optional[int]:
        """Open a request; ``None`` when an open one already exists for (user, day)."""

        raise NotImplementedError

    def attach_sign_out(self, *, request_id: int, sign_out_time: datetime) -> bool:
        """Set sign-out only on a still-pending request that has none."""

        raise NotImplementedError

    def approve(self, *, request_id: int, decided_by: int) -> Optional[int]:
        """Flip pending->approved and upsert the ledger record in one transaction.

        Returns the attendance id, or ``None`` if the request was not pending.
        """

        raise NotImplementedError

    def reject(self, *, request_id: int, decided_by: int, admin_note: Optional[str] = None) -> bool:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        user_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[PendingSignIn]:
        """Newest first."""

        raise NotImplementedError

    def count_requests(self, *, status: Optional[RequestStatus] = None) -> int:
        raise NotImplementedError
