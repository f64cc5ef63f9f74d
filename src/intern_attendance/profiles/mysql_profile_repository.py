from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import Role
from ..core.exceptions import StoreError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Profile
from .repository import ProfileRepository

_PROFILE_COLUMNS = "user_id, name, email, password_hash, role, intern_id, phone_number, is_active"


def _to_profile(row: Dict[str, Any]) -> Profile:
    return Profile(
        user_id=int(row["user_id"]),
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        intern_id=row.get("intern_id"),
        phone_number=row.get("phone_number"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLProfileRepository(ProfileRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_PROFILE_COLUMNS} FROM profiles WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_profile(row) if row else None

    def get_by_email(self, email: str) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_PROFILE_COLUMNS} FROM profiles WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_profile(row) if row else None

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO profiles(name, email, password_hash, role, intern_id, phone_number, is_active)
                    VALUES(%s,%s,%s,%s,%s,%s,1)
                    """,
                    (name, email, password_hash, role.value, intern_id, phone_number),
                )
                return int(cur.lastrowid)
        except StoreError as e:
            if isinstance(e.__cause__, mysql.connector.IntegrityError) and e.__cause__.errno == errorcode.ER_DUP_ENTRY:
                return None
            raise

    def update_profile(
        self,
        *,
        user_id: int,
        name: str,
        intern_id: Optional[str],
        phone_number: Optional[str],
        role: Role,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE profiles
                SET name=%s, intern_id=%s, phone_number=%s, role=%s
                WHERE user_id=%s
                """,
                (name, intern_id, phone_number, role.value, int(user_id)),
            )
            return cur.rowcount > 0

    def list_by_role(self, role: Role) -> Sequence[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_PROFILE_COLUMNS} FROM profiles WHERE role=%s ORDER BY name ASC",
                (role.value,),
            )
            return [_to_profile(r) for r in fetchall(cur)]

    def count_by_role(self, role: Role) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM profiles WHERE role=%s AND is_active=1", (role.value,))
            row = fetchone(cur)
            return int(row["n"]) if row else 0
