from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..attendance.status import validate_times
from ..common.datetime_utils import is_weekday, now_local, to_operating_time
from ..common.validators import optional_text
from ..core.constants import DEFAULT_REQUEST_LIST_LIMIT
from ..core.enums import RequestStatus, Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..profiles.repository import ProfileRepository
from .model import PendingSignIn
from .repository import PendingSignInRepository

logger = logging.getLogger(__name__)


class SignInRequestService:
    """Approval-gated workflow: interns submit requests, admins decide.

    Nothing reaches the attendance ledger until ``approve``.
    """

    def __init__(
        self,
        requests: PendingSignInRepository,
        attendance: AttendanceRepository,
        profiles: ProfileRepository,
    ):
        self._requests = requests
        self._attendance = attendance
        self._profiles = profiles

    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only an admin can review attendance requests")

    def request_sign_in(self, user_id: int, *, now: Optional[datetime] = None) -> PendingSignIn:
        now = to_operating_time(now or now_local())
        today = now.date()

        if not is_weekday(today):
            raise ValidationError("Attendance can only be recorded on weekdays")
        if not self._profiles.get_by_id(int(user_id)):
            raise ValidationError("User does not exist")

        record = self._attendance.get_for_user_and_date(int(user_id), today)
        if record and record.sign_in_time is not None:
            raise ValidationError("You have already signed in today")
        if self._requests.get_open_for_user_and_date(int(user_id), today):
            raise ValidationError("Your sign-in request for today is awaiting approval")

        request_id = self._requests.create_pending(user_id=int(user_id), work_date=today, sign_in_time=now)
        if request_id is None:
            raise ValidationError("Your sign-in request for today is awaiting approval")

        logger.info("Sign-in request %s opened user_id=%s date=%s", request_id, user_id, today)
        return self._requests.get_by_id(request_id)

    def request_sign_out(self, user_id: int, *, now: Optional[datetime] = None) -> PendingSignIn:
        now = to_operating_time(now or now_local())
        today = now.date()

        if not is_weekday(today):
            raise ValidationError("Attendance can only be recorded on weekdays")

        pending = self._requests.get_open_for_user_and_date(int(user_id), today)
        if pending:
            if pending.sign_out_time is not None:
                raise ValidationError("Your sign-out request for today is awaiting approval")
            validate_times(pending.sign_in_time, now)
            if not self._requests.attach_sign_out(request_id=pending.request_id, sign_out_time=now):
                raise ValidationError("This request was already updated or reviewed, refresh and try again")
            logger.info("Sign-out attached to request %s", pending.request_id)
            return self._requests.get_by_id(pending.request_id)

        record = self._attendance.get_for_user_and_date(int(user_id), today)
        if not record or record.sign_in_time is None:
            raise ValidationError("You must sign in first")
        if record.sign_out_time is not None:
            raise ValidationError("You have already signed out today")
        validate_times(record.sign_in_time, now)

        # Sign-in already approved: the sign-out goes through review on its own request.
        request_id = self._requests.create_pending(
            user_id=int(user_id),
            work_date=today,
            sign_in_time=record.sign_in_time,
            sign_out_time=now,
        )
        if request_id is None:
            raise ValidationError("Your sign-out request for today is awaiting approval")

        logger.info("Sign-out request %s opened user_id=%s date=%s", request_id, user_id, today)
        return self._requests.get_by_id(request_id)

    def approve(self, *, current_role: Role, admin_user_id: int, request_id: int) -> AttendanceRecord:
        self._require_admin(current_role)

        req = self._requests.get_by_id(int(request_id))
        if not req:
            raise ValidationError("Request does not exist")
        if req.status == RequestStatus.REJECTED:
            raise ValidationError("This request was already rejected")

        if req.status == RequestStatus.PENDING:
            validate_times(req.sign_in_time, req.sign_out_time)
            attendance_id = self._requests.approve(request_id=req.request_id, decided_by=int(admin_user_id))
            if attendance_id is not None:
                logger.info("Request %s approved by user_id=%s", req.request_id, admin_user_id)
                return self._attendance.get_by_id(attendance_id)

            # Lost a race with another reviewer; fall through on the fresh state.
            req = self._requests.get_by_id(req.request_id)
            if req is None or req.status != RequestStatus.APPROVED:
                raise ValidationError("This request was already reviewed")

        # Already approved: no second write.
        record = self._attendance.get_for_user_and_date(req.user_id, req.work_date)
        if not record:
            raise ValidationError("Approved request has no attendance record")
        return record

    def reject(
        self,
        *,
        current_role: Role,
        admin_user_id: int,
        request_id: int,
        admin_note: str = "",
    ) -> PendingSignIn:
        self._require_admin(current_role)

        req = self._requests.get_by_id(int(request_id))
        if not req:
            raise ValidationError("Request does not exist")
        if not req.is_open:
            raise ValidationError("This request was already reviewed")

        if not self._requests.reject(
            request_id=req.request_id,
            decided_by=int(admin_user_id),
            admin_note=optional_text(admin_note),
        ):
            raise ValidationError("This request was already reviewed")

        logger.info("Request %s rejected by user_id=%s", req.request_id, admin_user_id)
        return self._requests.get_by_id(req.request_id)

    def list_my_requests(self, *, user_id: int) -> list[PendingSignIn]:
        return list(self._requests.list_requests(user_id=int(user_id), limit=DEFAULT_REQUEST_LIST_LIMIT))

    def list_admin_pending(self) -> list[PendingSignIn]:
        return list(self._requests.list_requests(status=RequestStatus.PENDING, limit=DEFAULT_REQUEST_LIST_LIMIT))

    def count_pending(self) -> int:
        return self._requests.count_requests(status=RequestStatus.PENDING)
