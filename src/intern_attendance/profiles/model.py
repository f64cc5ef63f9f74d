from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Profile:
    """Domain entity: an account and its profile fields.

    Plain data object; the ledger references it only by ``user_id``.
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    intern_id: Optional[str] = None
    phone_number: Optional[str] = None
    is_active: bool = True

    def public_view(self) -> dict:
        return {
            "id": self.user_id,
            "name": self.name,
            "email": self.email,
            "intern_id": self.intern_id,
            "role": self.role.value,
            "phone_number": self.phone_number,
        }
