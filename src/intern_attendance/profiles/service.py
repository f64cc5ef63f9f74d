from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import optional_text, require_email, require_min_length, require_non_empty
from ..core.constants import ADMIN_INTERN_ID, MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from .model import Profile
from .repository import ProfileRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    name: str
    role: Role


class AuthService:
    """Use cases: sign up, log in, first admin setup."""

    def __init__(self, profiles: ProfileRepository):
        self._profiles = profiles

    def _create(
        self,
        *,
        name: str,
        email: str,
        password: str,
        role: Role,
        intern_id: Optional[str],
        phone_number: Optional[str],
    ) -> Profile:
        name = require_non_empty(name, "Name")
        email = require_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._profiles.get_by_email(email):
            raise ValidationError("An account with this email already exists")

        user_id = self._profiles.create_profile(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            intern_id=optional_text(intern_id),
            phone_number=optional_text(phone_number),
        )
        if user_id is None:
            raise ValidationError("An account with this email already exists")

        profile = self._profiles.get_by_id(user_id)
        if not profile:
            raise ValidationError("Failed to load user profile")
        logger.info("Created %s profile user_id=%s", role.value, user_id)
        return profile

    def sign_up(
        self,
        *,
        name: str,
        email: str,
        password: str,
        intern_id: Optional[str] = None,
        phone_number: Optional[str] = None,
    ) -> Profile:
        return self._create(
            name=name,
            email=email,
            password=password,
            role=Role.INTERN,
            intern_id=intern_id,
            phone_number=phone_number,
        )

    def setup_admin(self, *, name: str, email: str, password: str, confirm_password: str) -> Profile:
        if password != confirm_password:
            raise ValidationError("Passwords do not match")
        if self._profiles.count_by_role(Role.ADMIN) > 0:
            raise AuthorizationError("An admin account already exists")

        return self._create(
            name=name,
            email=email,
            password=password,
            role=Role.ADMIN,
            intern_id=ADMIN_INTERN_ID,
            phone_number=None,
        )

    def authenticate(self, email: str, password: str) -> SessionUser:
        profile = self._profiles.get_by_email((email or "").strip().lower())
        if not profile or not profile.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(profile.password_hash, password or "")
        except ValueError:
            # e.g. placeholder or corrupted hash values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        return SessionUser(user_id=profile.user_id, name=profile.name, role=profile.role)


class ProfileService:
    """Use cases: read and edit profiles."""

    def __init__(self, profiles: ProfileRepository):
        self._profiles = profiles

    def get_profile(self, user_id: int) -> Optional[Profile]:
        return self._profiles.get_by_id(int(user_id))

    def list_interns(self) -> Sequence[Profile]:
        return self._profiles.list_by_role(Role.INTERN)

    def upsert_profile(
        self,
        *,
        current_user_id: int,
        current_role: Role,
        user_id: int,
        name: str,
        intern_id: Optional[str] = None,
        phone_number: Optional[str] = None,
        role: Optional[Role] = None,
    ) -> Profile:
        if int(current_user_id) != int(user_id) and current_role != Role.ADMIN:
            raise AuthorizationError("You can only edit your own profile")

        profile = self._profiles.get_by_id(int(user_id))
        if not profile:
            raise ValidationError("User does not exist")

        new_role = role or profile.role
        if new_role != profile.role and current_role != Role.ADMIN:
            raise AuthorizationError("Only an admin can change roles")

        ok = self._profiles.update_profile(
            user_id=profile.user_id,
            name=require_non_empty(name, "Name"),
            intern_id=optional_text(intern_id),
            phone_number=optional_text(phone_number),
            role=new_role,
        )
        if not ok:
            raise ValidationError("Failed to update profile")
        return self._profiles.get_by_id(profile.user_id)
