from __future__ import annotations

from datetime import date, datetime

import pytest

from intern_attendance.core.enums import Role
from intern_attendance.core.exceptions import ValidationError
from intern_attendance.reports.service import CSV_COLUMNS, AttendanceReportService

MONDAY = date(2026, 2, 2)


@pytest.fixture
def reports(attendance_repo, profiles_repo, attendance_service) -> AttendanceReportService:
    return AttendanceReportService(attendance_repo, profiles_repo, attendance_service)


def test_dashboard_counts(reports, attendance_service, intern_id, admin_id, add_profile):
    add_profile("Fatima Ibrahim", "fatima@example.com", intern_id="IIH002")
    attendance_service.sign_in(intern_id, now=datetime(2026, 2, 2, 8, 30))
    attendance_service.sign_in(admin_id, now=datetime(2026, 2, 2, 8, 0))

    stats = reports.build_dashboard(today=MONDAY, pending_requests=2)

    assert stats.as_dict() == {
        "total_interns": 2,
        "signed_in_today": 1,
        "absent_today": 1,
        "pending_requests": 2,
    }


def test_dashboard_omits_pending_in_direct_mode(reports):
    assert "pending_requests" not in reports.build_dashboard(today=MONDAY).as_dict()


def test_filter_by_search_and_status(reports, attendance_service, intern_id, add_profile):
    other = add_profile("Fatima Ibrahim", "fatima@example.com", intern_id="IIH002")
    attendance_service.sign_in(intern_id, now=datetime(2026, 2, 2, 8, 30))
    attendance_service.sign_out(intern_id, now=datetime(2026, 2, 2, 17, 0))
    attendance_service.sign_in(other, now=datetime(2026, 2, 2, 9, 0))

    assert [r.user_id for r in reports.filter_records(search="fatima")] == [other]
    assert [r.user_id for r in reports.filter_records(search="iih001")] == [intern_id]
    assert [r.user_id for r in reports.filter_records(status="present")] == [intern_id]
    assert [r.user_id for r in reports.filter_records(status="partial")] == [other]
    assert reports.filter_records(status="absent") == []


def test_filter_by_date_range(reports, attendance_service, intern_id):
    attendance_service.sign_in(intern_id, now=datetime(2026, 2, 2, 8, 30))
    attendance_service.sign_in(intern_id, now=datetime(2026, 2, 4, 8, 30))

    rows = reports.filter_records(start=date(2026, 2, 3), end=date(2026, 2, 5))
    assert [r.work_date for r in rows] == [date(2026, 2, 4)]


def test_unknown_status_filter(reports):
    with pytest.raises(ValidationError):
        reports.filter_records(status="late")


def test_export_csv_quotes_commas_and_quotes(reports, attendance_service, add_profile):
    uid = add_profile('Okafor, "Chinedu"', "chinedu@example.com", intern_id="IIH003")
    attendance_service.sign_in(uid, now=datetime(2026, 2, 2, 8, 30))

    text = reports.export_csv(reports.filter_records())
    lines = text.splitlines()

    assert lines[0] == ",".join(CSV_COLUMNS)
    assert lines[1] == '"Okafor, ""Chinedu""",IIH003,2026-02-02,08:30,N/A,partial'


def test_export_csv_unknown_intern_id(reports, attendance_service, add_profile):
    uid = add_profile("No Id", "noid@example.com")
    attendance_service.sign_in(uid, now=datetime(2026, 2, 2, 8, 30))
    attendance_service.sign_out(uid, now=datetime(2026, 2, 2, 17, 5))

    lines = reports.export_csv(reports.filter_records()).splitlines()
    assert lines[1] == "No Id,Unknown,2026-02-02,08:30,17:05,present"


def test_csv_filename():
    assert AttendanceReportService.csv_filename(MONDAY) == "attendance-report-2026-02-02.csv"


def test_intern_summaries(reports, attendance_service, intern_id, add_profile):
    other = add_profile("Fatima Ibrahim", "fatima@example.com", intern_id="IIH002")
    for day in (2, 3, 4, 5):
        attendance_service.sign_in(intern_id, now=datetime(2026, 2, day, 8, 30))

    summaries = {s["user_id"]: s for s in reports.intern_summaries(as_of=date(2026, 2, 6), window_size=5)}

    mine = summaries[intern_id]
    assert mine["missed_days"] == 1
    assert mine["attendance_rate"] == 80
    assert mine["high_absences"] is False

    theirs = summaries[other]
    assert theirs["missed_days"] == 5
    assert theirs["attendance_rate"] == 0
    assert theirs["high_absences"] is True


def test_summaries_cover_interns_only(reports, intern_id, admin_id, profiles_repo):
    ids = [s["user_id"] for s in reports.intern_summaries(as_of=MONDAY, window_size=3)]
    assert ids == [intern_id]
    assert profiles_repo.get_by_id(admin_id).role == Role.ADMIN
