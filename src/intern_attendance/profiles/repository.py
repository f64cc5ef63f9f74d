from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Profile


class ProfileRepository(Protocol):
    """Repository interface for profiles.

    Services depend on this interface, never on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[Profile]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Profile]:
        raise NotImplementedError

    def create_profile(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        intern_id: Optional[str],
        phone_number: Optional[str],
    ) -> Optional[int]:
        """Create identity and profile in one write; ``None`` if the email is taken."""

        raise NotImplementedError

    def update_profile(
        self,
        *,
        user_id: int,
        name: str,
        intern_id: Optional[str],
        phone_number: Optional[str],
        role: Role,
    ) -> bool:
        raise NotImplementedError

    def list_by_role(self, role: Role) -> Sequence[Profile]:
        raise NotImplementedError

    def count_by_role(self, role: Role) -> int:
        raise NotImplementedError
