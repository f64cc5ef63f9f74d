from __future__ import annotations

from flask import Flask, request

from ..common.web import domain_errors, json_ok, optional_date, request_now, roles_required
from ..container import Container
from ..core.enums import Role, Workflow


def register(app: Flask, container: Container) -> None:
    def _filtered_rows():
        return container.report_service.filter_records(
            search=request.args.get("search", ""),
            status=request.args.get("status", "all"),
            start=optional_date(request.args.get("start"), "start"),
            end=optional_date(request.args.get("end"), "end"),
        )

    @app.route("/api/admin/dashboard", methods=["GET"], endpoint="admin_dashboard")
    @roles_required(Role.ADMIN, Role.HR)
    @domain_errors
    def admin_dashboard():
        pending = None
        if container.workflow == Workflow.APPROVAL:
            pending = container.request_service.count_pending()
        stats = container.report_service.build_dashboard(today=request_now().date(), pending_requests=pending)
        return json_ok(stats=stats.as_dict())

    @app.route("/api/admin/attendance", methods=["GET"], endpoint="admin_attendance")
    @roles_required(Role.ADMIN, Role.HR)
    @domain_errors
    def admin_attendance():
        return json_ok(records=container.report_service.to_ui(_filtered_rows()))

    @app.route("/api/admin/attendance.csv", methods=["GET"], endpoint="admin_attendance_csv")
    @roles_required(Role.ADMIN, Role.HR)
    @domain_errors
    def admin_attendance_csv():
        csv_text = container.report_service.export_csv(_filtered_rows())
        filename = container.report_service.csv_filename(request_now().date())
        return app.response_class(
            csv_text.encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/admin/interns", methods=["GET"], endpoint="admin_interns")
    @roles_required(Role.ADMIN, Role.HR)
    @domain_errors
    def admin_interns():
        as_of = optional_date(request.args.get("as_of"), "as_of") or request_now().date()
        return json_ok(
            as_of=as_of.isoformat(),
            interns=container.report_service.intern_summaries(as_of=as_of),
        )
