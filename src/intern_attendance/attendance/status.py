from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError


def derive_status(sign_in_time: Optional[datetime], sign_out_time: Optional[datetime]) -> AttendanceStatus:
    """Classify a user-day from its two timestamps.

    Never stored as truth: the ``status`` column is a cache rewritten on every
    timestamp write from this function.
    """
    if sign_in_time is not None and sign_out_time is not None:
        return AttendanceStatus.PRESENT
    if sign_in_time is not None:
        return AttendanceStatus.PARTIAL
    return AttendanceStatus.ABSENT


def validate_times(sign_in_time: Optional[datetime], sign_out_time: Optional[datetime]) -> None:
    if sign_out_time is None:
        return
    if sign_in_time is None:
        raise ValidationError("Sign-out time requires a sign-in time")
    if sign_out_time.date() != sign_in_time.date():
        raise ValidationError("Sign-out must be on the same day as sign-in")
    if sign_out_time <= sign_in_time:
        raise ValidationError("Sign-out time must be later than sign-in time")
