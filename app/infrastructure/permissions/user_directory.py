"""
Adapter: User directory.

Implements UserDirectory port.
Reads user profiles and their managing admin from the profiles table.
"""

import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from app.domain.permissions.entities import ManagedByFilter, ManagedUser
from app.domain.permissions.ports import UserDirectory

logger = logging.getLogger(__name__)


class SqlUserDirectory(UserDirectory):
    """Reads user profiles from PostgreSQL.

    Implements the UserDirectory port defined in the domain layer.
    """

    def __init__(self, engine: Engine, table: str = "profiles") -> None:
        if not table.isidentifier():
            raise ValueError(f"Invalid table name: {table!r}")
        self._engine = engine
        self._table = table

    def list_users(self, managed_by: ManagedByFilter) -> list[ManagedUser]:
        """Return profiles matching the filter, newest first.

        Args:
            managed_by: Filter over the managing admin.

        Returns:
            List of ManagedUser entities.
        """
        query = (
            "SELECT id::text AS id, username, email, managed_by::text AS managed_by "
            f"FROM {self._table}"
        )
        params: dict = {}

        if managed_by.kind == ManagedByFilter.UNASSIGNED:
            query += " WHERE managed_by IS NULL"
        elif managed_by.kind == ManagedByFilter.MANAGER:
            query += " WHERE managed_by = :manager_id"
            params["manager_id"] = managed_by.manager_id

        query += " ORDER BY created_at DESC"

        with self._engine.connect() as conn:
            rows = conn.execute(text(query), params).mappings().all()

        logger.info("Listed %d profiles (filter=%s).", len(rows), managed_by.kind)
        return [_to_user(row) for row in rows]

    def get_user(self, user_id: str) -> Optional[ManagedUser]:
        """Return one profile, or None if it does not exist."""
        query = text(
            "SELECT id::text AS id, username, email, managed_by::text AS managed_by "
            f"FROM {self._table} WHERE id = :user_id"
        )

        with self._engine.connect() as conn:
            row = conn.execute(query, {"user_id": user_id}).mappings().first()

        return _to_user(row) if row is not None else None


def _to_user(row) -> ManagedUser:
    return ManagedUser(
        id=str(row["id"]),
        username=row.get("username"),
        email=row.get("email"),
        managed_by=row.get("managed_by"),
    )
