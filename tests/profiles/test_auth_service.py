from __future__ import annotations

import pytest

from intern_attendance.core.constants import ADMIN_INTERN_ID
from intern_attendance.core.enums import Role
from intern_attendance.core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from intern_attendance.profiles.service import AuthService, ProfileService


@pytest.fixture
def auth(profiles_repo) -> AuthService:
    return AuthService(profiles_repo)


@pytest.fixture
def profile_service(profiles_repo) -> ProfileService:
    return ProfileService(profiles_repo)


def test_sign_up_creates_intern_profile(auth):
    p = auth.sign_up(name=" Kemi Adeyemi ", email="Kemi@Example.com", password="secret123", intern_id="IIH004")

    assert p.role == Role.INTERN
    assert p.name == "Kemi Adeyemi"
    assert p.email == "kemi@example.com"
    assert p.intern_id == "IIH004"
    assert p.password_hash != "secret123"


def test_sign_up_rejects_duplicate_email(auth):
    auth.sign_up(name="Kemi", email="kemi@example.com", password="secret123")
    with pytest.raises(ValidationError, match="already exists"):
        auth.sign_up(name="Kemi Two", email="KEMI@example.com", password="secret123")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"name": "", "email": "a@example.com", "password": "secret123"},
        {"name": "A", "email": "not-an-email", "password": "secret123"},
        {"name": "A", "email": "a@example.com", "password": "123"},
    ],
)
def test_sign_up_validation(auth, kwargs):
    with pytest.raises(ValidationError):
        auth.sign_up(**kwargs)


def test_authenticate(auth):
    created = auth.sign_up(name="Kemi", email="kemi@example.com", password="secret123")

    user = auth.authenticate("  KEMI@example.com ", "secret123")
    assert user.user_id == created.user_id
    assert user.role == Role.INTERN


@pytest.mark.parametrize("email, password", [("kemi@example.com", "wrong"), ("nobody@example.com", "secret123")])
def test_authenticate_failure_is_generic(auth, email, password):
    auth.sign_up(name="Kemi", email="kemi@example.com", password="secret123")
    with pytest.raises(AuthenticationError, match="Invalid email or password"):
        auth.authenticate(email, password)


def test_setup_admin_only_once(auth):
    admin = auth.setup_admin(
        name="Admin User", email="admin@iih.ng", password="admin123", confirm_password="admin123"
    )
    assert admin.role == Role.ADMIN
    assert admin.intern_id == ADMIN_INTERN_ID

    with pytest.raises(AuthorizationError):
        auth.setup_admin(name="Other", email="other@iih.ng", password="admin123", confirm_password="admin123")


def test_setup_admin_password_mismatch(auth):
    with pytest.raises(ValidationError, match="do not match"):
        auth.setup_admin(name="Admin", email="admin@iih.ng", password="admin123", confirm_password="admin124")


def test_intern_edits_own_profile(profile_service, intern_id):
    p = profile_service.upsert_profile(
        current_user_id=intern_id,
        current_role=Role.INTERN,
        user_id=intern_id,
        name="Adeolu A.",
        phone_number="+2348012345678",
    )
    assert p.name == "Adeolu A."
    assert p.phone_number == "+2348012345678"
    assert p.role == Role.INTERN


def test_intern_cannot_edit_others_or_change_role(profile_service, intern_id, add_profile):
    other = add_profile("Fatima Ibrahim", "fatima@example.com")

    with pytest.raises(AuthorizationError):
        profile_service.upsert_profile(
            current_user_id=intern_id, current_role=Role.INTERN, user_id=other, name="Hacked"
        )
    with pytest.raises(AuthorizationError):
        profile_service.upsert_profile(
            current_user_id=intern_id, current_role=Role.INTERN, user_id=intern_id, name="Me", role=Role.ADMIN
        )


def test_admin_can_change_role(profile_service, intern_id, admin_id):
    p = profile_service.upsert_profile(
        current_user_id=admin_id, current_role=Role.ADMIN, user_id=intern_id, name="Adeolu", role=Role.HR
    )
    assert p.role == Role.HR
    assert profile_service.list_interns() == []
