from __future__ import annotations

from flask import Flask

from ..attendance.service import AttendanceService
from ..common.web import current_role, current_user_id, domain_errors, json_body, json_ok, login_required, roles_required
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    @app.route("/api/requests", methods=["GET"], endpoint="my_requests")
    @login_required
    @domain_errors
    def my_requests():
        items = container.request_service.list_my_requests(user_id=current_user_id())
        return json_ok(requests=[r.to_ui() for r in items])

    @app.route("/api/admin/requests", methods=["GET"], endpoint="admin_requests")
    @roles_required(Role.ADMIN)
    @domain_errors
    def admin_requests():
        items = container.request_service.list_admin_pending()
        return json_ok(requests=[r.to_ui() for r in items])

    @app.route("/api/admin/requests/<int:request_id>/approve", methods=["POST"], endpoint="approve_request")
    @roles_required(Role.ADMIN)
    @domain_errors
    def approve_request(request_id: int):
        record = container.request_service.approve(
            current_role=current_role(),
            admin_user_id=current_user_id(),
            request_id=request_id,
        )
        return json_ok(message="Request approved", record=AttendanceService.to_ui(record))

    @app.route("/api/admin/requests/<int:request_id>/reject", methods=["POST"], endpoint="reject_request")
    @roles_required(Role.ADMIN)
    @domain_errors
    def reject_request(request_id: int):
        req = container.request_service.reject(
            current_role=current_role(),
            admin_user_id=current_user_id(),
            request_id=request_id,
            admin_note=json_body().get("admin_note", ""),
        )
        return json_ok(message="Request rejected", request=req.to_ui())
