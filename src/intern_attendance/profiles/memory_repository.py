from __future__ import annotations

import threading
from dataclasses import replace
from typing import Optional, Sequence

from ..core.enums import Role
from .model import Profile
from .repository import ProfileRepository


class InMemoryProfileRepository(ProfileRepository):
    def __init__(self):
        self._lock = threading.Lock()
        self._by_id: dict[int, Profile] = {}
        self._next_id = 0

    def get_by_id(self, user_id: int) -> Optional[Profile]:
        return self._by_id.get(int(user_id))

    def get_by_email(self, email: str) -> Optional[Profile]:
        return next((p for p in self._by_id.values() if p.email == email), None)

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
        with self._lock:
            if self.get_by_email(email):
                return None
            self._next_id += 1
            self._by_id[self._next_id] = Profile(
                user_id=self._next_id,
                name=name,
                email=email,
                password_hash=password_hash,
                role=role,
                intern_id=intern_id,
                phone_number=phone_number,
            )
            return self._next_id

    def update_profile(
        self,
        *,
        user_id: int,
        name: str,
        intern_id: Optional[str],
        phone_number: Optional[str],
        role: Role,
    ) -> bool:
        with self._lock:
            profile = self._by_id.get(int(user_id))
            if not profile:
                return False
            self._by_id[profile.user_id] = replace(
                profile, name=name, intern_id=intern_id, phone_number=phone_number, role=role
            )
            return True

    def list_by_role(self, role: Role) -> Sequence[Profile]:
        return sorted((p for p in self._by_id.values() if p.role == role), key=lambda p: p.name)

    def count_by_role(self, role: Role) -> int:
        return sum(1 for p in self._by_id.values() if p.role == role and p.is_active)
