from __future__ import annotations

from flask import Flask, request

from ..common.web import (
    current_role,
    current_user_id,
    domain_errors,
    json_body,
    json_ok,
    login_required,
    optional_date,
    optional_datetime,
    request_now,
    roles_required,
)
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import Role, Workflow
from ..core.exceptions import ValidationError
from .service import AttendanceService


def register(app: Flask, container: Container) -> None:
    approval_mode = container.workflow == Workflow.APPROVAL

    @app.route("/api/attendance/sign-in", methods=["POST"], endpoint="sign_in")
    @login_required
    @domain_errors
    def sign_in():
        if approval_mode:
            req = container.request_service.request_sign_in(current_user_id(), now=request_now())
            return json_ok(201, message="Sign-in submitted for approval", request=req.to_ui())

        record = container.attendance_service.sign_in(current_user_id(), now=request_now())
        return json_ok(201, message="Signed in successfully", record=AttendanceService.to_ui(record))

    @app.route("/api/attendance/sign-out", methods=["POST"], endpoint="sign_out")
    @login_required
    @domain_errors
    def sign_out():
        if approval_mode:
            req = container.request_service.request_sign_out(current_user_id(), now=request_now())
            return json_ok(message="Sign-out submitted for approval", request=req.to_ui())

        record = container.attendance_service.sign_out(current_user_id(), now=request_now())
        return json_ok(message="Signed out successfully", record=AttendanceService.to_ui(record))

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    @domain_errors
    def attendance_today():
        now = request_now()
        record = container.attendance_service.get_today_record(current_user_id(), now=now)
        payload = {
            "workflow": container.workflow.value,
            "record": AttendanceService.to_ui(record) if record else None,
        }
        if approval_mode:
            pending = container.requests_repo.get_open_for_user_and_date(current_user_id(), now.date())
            payload["pending_request"] = pending.to_ui() if pending else None
        return json_ok(**payload)

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    @domain_errors
    def attendance_history():
        try:
            limit = int(request.args.get("limit") or DEFAULT_HISTORY_LIMIT)
        except ValueError:
            raise ValidationError("limit must be an integer")
        return json_ok(records=container.attendance_service.get_history_ui(current_user_id(), limit=limit))

    @app.route("/api/attendance/missed-days", methods=["GET"], endpoint="missed_days")
    @login_required
    @domain_errors
    def missed_days():
        as_of = optional_date(request.args.get("as_of"), "as_of") or request_now().date()
        days = container.attendance_service.compute_missed_days(current_user_id(), as_of=as_of)
        return json_ok(as_of=as_of.isoformat(), missed_days=[d.isoformat() for d in days])

    @app.route("/api/admin/attendance/<int:attendance_id>", methods=["PUT"], endpoint="admin_edit_attendance")
    @roles_required(Role.ADMIN)
    @domain_errors
    def admin_edit_attendance(attendance_id: int):
        data = json_body()
        record = container.attendance_service.admin_update_record(
            current_role=current_role(),
            attendance_id=attendance_id,
            sign_in_time=optional_datetime(data.get("sign_in"), "sign_in"),
            sign_out_time=optional_datetime(data.get("sign_out"), "sign_out"),
            note=data.get("note"),
        )
        return json_ok(record=AttendanceService.to_ui(record))
