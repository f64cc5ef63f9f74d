from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import format_clock
from ..core.enums import RequestStatus


@dataclass(frozen=True)
class PendingSignIn:
    """A sign-in (and optionally sign-out) awaiting admin review.

    Not part of the ledger until approved.
    """

    request_id: int
    user_id: int
    work_date: date
    sign_in_time: datetime
    sign_out_time: Optional[datetime]
    status: RequestStatus
    created_at: datetime
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    admin_note: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.status == RequestStatus.PENDING

    def to_ui(self) -> dict:
        return {
            "id": self.request_id,
            "user_id": self.user_id,
            "date": self.work_date.strftime("%Y-%m-%d"),
            "sign_in": format_clock(self.sign_in_time),
            "sign_out": format_clock(self.sign_out_time),
            "status": self.status.value,
            "created_at": self.created_at.strftime("%Y-%m-%d %H:%M"),
            "admin_note": self.admin_note or "",
        }
