from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from intern_attendance.core.enums import AttendanceStatus, Role
from intern_attendance.core.exceptions import AuthorizationError, ValidationError


def test_sign_in_creates_partial_record(attendance_service, attendance_repo, intern_id, fixed_now):
    rec = attendance_service.sign_in(intern_id, now=fixed_now)

    assert rec.work_date == fixed_now.date()
    assert rec.sign_in_time == fixed_now
    assert rec.sign_out_time is None
    assert rec.status == AttendanceStatus.PARTIAL
    assert attendance_repo.get_for_user_and_date(intern_id, fixed_now.date()) == rec


def test_monday_scenario_is_present(attendance_service, intern_id):
    attendance_service.sign_in(intern_id, now=datetime(2026, 2, 2, 8, 30))
    rec = attendance_service.sign_out(intern_id, now=datetime(2026, 2, 2, 17, 5))

    assert rec.status == AttendanceStatus.PRESENT
    ui = attendance_service.to_ui(rec)
    assert ui["sign_in"] == "08:30"
    assert ui["sign_out"] == "17:05"


def test_second_sign_in_fails_without_mutation(attendance_service, attendance_repo, intern_id, fixed_now):
    first = attendance_service.sign_in(intern_id, now=fixed_now)

    with pytest.raises(ValidationError, match="already signed in"):
        attendance_service.sign_in(intern_id, now=fixed_now.replace(hour=9))

    assert attendance_repo.list_for_user(intern_id) == [first]


def test_sign_in_on_weekend_fails(attendance_service, attendance_repo, intern_id):
    saturday = datetime(2026, 2, 7, 9, 0)
    with pytest.raises(ValidationError, match="weekdays"):
        attendance_service.sign_in(intern_id, now=saturday)
    assert attendance_repo.list_all() == []


def test_unknown_user_cannot_sign_in(attendance_service, fixed_now):
    with pytest.raises(ValidationError):
        attendance_service.sign_in(999, now=fixed_now)


def test_sign_out_before_sign_in_fails(attendance_service, attendance_repo, intern_id, fixed_now):
    with pytest.raises(ValidationError, match="sign in first"):
        attendance_service.sign_out(intern_id, now=fixed_now)
    assert attendance_repo.list_all() == []


def test_double_sign_out_fails(attendance_service, intern_id, fixed_now):
    attendance_service.sign_in(intern_id, now=fixed_now)
    first = attendance_service.sign_out(intern_id, now=fixed_now.replace(hour=17))

    with pytest.raises(ValidationError, match="already signed out"):
        attendance_service.sign_out(intern_id, now=fixed_now.replace(hour=18))

    assert attendance_service.get_today_record(intern_id, now=fixed_now).sign_out_time == first.sign_out_time


def test_stale_sign_out_loses_race(attendance_service, attendance_repo, intern_id, fixed_now):
    rec = attendance_service.sign_in(intern_id, now=fixed_now)
    assert attendance_repo.record_sign_out(attendance_id=rec.attendance_id, sign_out_time=fixed_now.replace(hour=16))

    # A second writer holding the pre-sign-out read must not overwrite.
    assert not attendance_repo.record_sign_out(attendance_id=rec.attendance_id, sign_out_time=fixed_now.replace(hour=17))
    assert attendance_repo.get_by_id(rec.attendance_id).sign_out_time.hour == 16


def test_sign_out_must_be_after_sign_in(attendance_service, intern_id, fixed_now):
    attendance_service.sign_in(intern_id, now=fixed_now)
    with pytest.raises(ValidationError):
        attendance_service.sign_out(intern_id, now=fixed_now)


def test_aware_times_use_operating_timezone(attendance_service, intern_id):
    # 23:30 UTC on Monday is 00:30 Tuesday in Lagos (UTC+1).
    rec = attendance_service.sign_in(intern_id, now=datetime(2026, 2, 2, 23, 30, tzinfo=timezone.utc))
    assert rec.work_date == date(2026, 2, 3)
    assert rec.sign_in_time == datetime(2026, 2, 3, 0, 30)


def test_lists_are_newest_first(attendance_service, intern_id, add_profile):
    other = add_profile("Fatima Ibrahim", "fatima@example.com", intern_id="IIH002")
    attendance_service.sign_in(intern_id, now=datetime(2026, 2, 2, 8, 0))
    attendance_service.sign_in(intern_id, now=datetime(2026, 2, 4, 8, 0))
    attendance_service.sign_in(other, now=datetime(2026, 2, 3, 8, 0))

    mine = attendance_service.list_for_user(intern_id)
    assert [r.work_date for r in mine] == [date(2026, 2, 4), date(2026, 2, 2)]

    everyone = attendance_service.list_all()
    assert [r.work_date for r in everyone] == [date(2026, 2, 4), date(2026, 2, 3), date(2026, 2, 2)]


def test_admin_edit_recomputes_status(attendance_service, intern_id, fixed_now):
    rec = attendance_service.sign_in(intern_id, now=fixed_now)

    edited = attendance_service.admin_update_record(
        current_role=Role.ADMIN,
        attendance_id=rec.attendance_id,
        sign_in_time=fixed_now.replace(hour=8, minute=0),
        sign_out_time=fixed_now.replace(hour=16, minute=0),
        note="Forgot to sign out",
    )

    assert edited.status == AttendanceStatus.PRESENT
    assert edited.note == "Forgot to sign out"


def test_admin_edit_rejects_inverted_times(attendance_service, intern_id, fixed_now):
    rec = attendance_service.sign_in(intern_id, now=fixed_now)
    with pytest.raises(ValidationError):
        attendance_service.admin_update_record(
            current_role=Role.ADMIN,
            attendance_id=rec.attendance_id,
            sign_in_time=fixed_now.replace(hour=17),
            sign_out_time=fixed_now.replace(hour=8),
        )


def test_intern_cannot_edit_records(attendance_service, intern_id, fixed_now):
    rec = attendance_service.sign_in(intern_id, now=fixed_now)
    with pytest.raises(AuthorizationError):
        attendance_service.admin_update_record(
            current_role=Role.INTERN,
            attendance_id=rec.attendance_id,
            sign_in_time=fixed_now,
            sign_out_time=None,
        )


def test_history_ui_shows_dash_for_missing_sign_out(attendance_service, intern_id, fixed_now):
    attendance_service.sign_in(intern_id, now=fixed_now)
    rows = attendance_service.get_history_ui(intern_id)
    assert rows[0]["sign_out"] == "-"
    assert rows[0]["status_label"] == "Partial"


def test_history_rejects_non_positive_limit(attendance_service, intern_id):
    for day in (2, 3, 4):
        attendance_service.sign_in(intern_id, now=datetime(2026, 2, day, 8, 30))

    for bad in (0, -1):
        with pytest.raises(ValidationError, match="limit"):
            attendance_service.get_history_ui(intern_id, limit=bad)
    assert len(attendance_service.get_history_ui(intern_id, limit=3)) == 3


def _clear_sign_in(attendance_service, record):
    return attendance_service.admin_update_record(
        current_role=Role.ADMIN,
        attendance_id=record.attendance_id,
        sign_in_time=None,
        sign_out_time=None,
        note="Cleared",
    )


def test_sign_in_fills_cleared_placeholder(attendance_service, attendance_repo, intern_id, fixed_now):
    rec = attendance_service.sign_in(intern_id, now=fixed_now)
    cleared = _clear_sign_in(attendance_service, rec)
    assert cleared.status == AttendanceStatus.ABSENT

    filled = attendance_service.sign_in(intern_id, now=fixed_now.replace(hour=9))

    assert filled.attendance_id == rec.attendance_id
    assert filled.sign_in_time.hour == 9
    assert filled.note == "Cleared"
    assert len(attendance_repo.list_for_user(intern_id)) == 1


def test_stale_placeholder_sign_in_loses_race(attendance_service, attendance_repo, intern_id, fixed_now, monkeypatch):
    rec = attendance_service.sign_in(intern_id, now=fixed_now)
    placeholder = _clear_sign_in(attendance_service, rec)

    # Another request fills the placeholder after this one has read it.
    assert attendance_repo.fill_sign_in(attendance_id=rec.attendance_id, sign_in_time=fixed_now.replace(hour=9))
    monkeypatch.setattr(attendance_repo, "get_for_user_and_date", lambda user_id, work_date: placeholder)

    with pytest.raises(ValidationError, match="already signed in"):
        attendance_service.sign_in(intern_id, now=fixed_now.replace(hour=10))

    assert attendance_repo.get_by_id(rec.attendance_id).sign_in_time.hour == 9
