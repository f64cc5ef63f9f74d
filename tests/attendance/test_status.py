from datetime import datetime

import pytest

from intern_attendance.attendance.model import AttendanceRecord
from intern_attendance.attendance.status import derive_status, validate_times
from intern_attendance.core.enums import AttendanceStatus
from intern_attendance.core.exceptions import ValidationError

IN = datetime(2026, 2, 2, 8, 30)
OUT = datetime(2026, 2, 2, 17, 5)


@pytest.mark.parametrize(
    "sign_in, sign_out, expected",
    [
        (IN, OUT, AttendanceStatus.PRESENT),
        (IN, None, AttendanceStatus.PARTIAL),
        (None, None, AttendanceStatus.ABSENT),
    ],
)
def test_derive_status(sign_in, sign_out, expected):
    assert derive_status(sign_in, sign_out) == expected


def test_record_status_follows_timestamps():
    rec = AttendanceRecord(attendance_id=1, user_id=1, work_date=IN.date(), sign_in_time=IN, sign_out_time=None)
    assert rec.status == AttendanceStatus.PARTIAL


def test_sign_out_must_be_after_sign_in():
    with pytest.raises(ValidationError):
        validate_times(IN, IN)


def test_sign_out_must_be_same_day():
    with pytest.raises(ValidationError):
        validate_times(IN, datetime(2026, 2, 3, 9, 0))


def test_sign_out_without_sign_in_is_invalid():
    with pytest.raises(ValidationError):
        validate_times(None, OUT)
