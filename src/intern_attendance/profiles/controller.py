from __future__ import annotations

from datetime import timedelta

from flask import Flask, session

from ..common.web import current_role, current_user_id, domain_errors, json_body, json_fail, json_ok, login_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError


def _target_user_id(value) -> int:
    if value in (None, ""):
        return current_user_id()
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("user_id must be an integer")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/signup", methods=["POST"], endpoint="signup")
    @domain_errors
    def signup():
        data = json_body()
        profile = container.auth_service.sign_up(
            name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            intern_id=data.get("intern_id"),
            phone_number=data.get("phone_number"),
        )
        # No auto-login on sign-up.
        return json_ok(201, user=profile.public_view())

    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    @domain_errors
    def login():
        data = json_body()
        s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))

        session.clear()
        session.permanent = bool(data.get("remember_me"))
        app.permanent_session_lifetime = timedelta(days=7)
        session["user_id"] = s_user.user_id
        session["name"] = s_user.name
        session["role"] = s_user.role.value

        profile = container.profile_service.get_profile(s_user.user_id)
        if not profile:
            session.clear()
            return json_fail("Failed to load user profile", 500)
        return json_ok(user=profile.public_view())

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return json_ok()

    @app.route("/api/auth/session", methods=["GET"], endpoint="current_session")
    @domain_errors
    def current_session():
        if "user_id" not in session:
            return json_ok(user=None)
        profile = container.profile_service.get_profile(current_user_id())
        if not profile or not profile.is_active:
            session.clear()
            return json_ok(user=None)
        return json_ok(user=profile.public_view())

    @app.route("/api/admin/setup", methods=["POST"], endpoint="admin_setup")
    @domain_errors
    def admin_setup():
        data = json_body()
        profile = container.auth_service.setup_admin(
            name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            confirm_password=data.get("confirm_password", ""),
        )
        return json_ok(201, user=profile.public_view())

    @app.route("/api/profile", methods=["PUT"], endpoint="update_profile")
    @login_required
    @domain_errors
    def update_profile():
        data = json_body()
        role = None
        if data.get("role"):
            try:
                role = Role(data["role"])
            except ValueError:
                raise ValidationError("Unknown role")

        profile = container.profile_service.upsert_profile(
            current_user_id=current_user_id(),
            current_role=current_role(),
            user_id=_target_user_id(data.get("user_id")),
            name=data.get("name", ""),
            intern_id=data.get("intern_id"),
            phone_number=data.get("phone_number"),
            role=role,
        )
        if profile.user_id == current_user_id():
            session["name"] = profile.name
            session["role"] = profile.role.value
        return json_ok(user=profile.public_view())
