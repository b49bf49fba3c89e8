"""
Adapter: Trade permission store.

Implements PermissionStore port on PostgreSQL through SQLAlchemy Core.
Driver failures are classified here, where they are raised, into the
typed PermissionStoreError family the resolver falls back on.
"""

import logging
import re
from typing import Optional

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from app.domain.permissions.entities import PermissionRow
from app.domain.permissions.errors import (
    PermissionStoreError,
    RelationMissingError,
    SchemaMismatchError,
)
from app.domain.permissions.ports import PermissionStore

logger = logging.getLogger(__name__)

UNDEFINED_TABLE = "42P01"
UNDEFINED_COLUMN = "42703"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# column "x" does not exist / column t.x does not exist /
# column "x" of relation "t" does not exist
_COLUMN_IN_MESSAGE = re.compile(r'column\s+"?(?:[\w]+\.)?"?(\w+)"?', re.IGNORECASE)
_RELATION_IN_MESSAGE = re.compile(r'relation\s+"?(?:\w+\.)?(\w+)"?', re.IGNORECASE)


def _sqlstate(exc: DBAPIError) -> Optional[str]:
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    return str(code) if code else None


def _diagnostic(exc: DBAPIError) -> str:
    diag = getattr(exc.orig, "diag", None)
    primary = getattr(diag, "message_primary", None)
    return str(primary) if primary else str(exc.orig)


def classify_store_error(exc: SQLAlchemyError, table: str) -> PermissionStoreError:
    """Translate a SQLAlchemy error into the domain storage error family.

    Args:
        exc: The error raised by SQLAlchemy.
        table: Table the failing statement targeted.

    Returns:
        RelationMissingError for SQLSTATE 42P01, SchemaMismatchError for
        42703, PermissionStoreError for anything else.
    """
    if isinstance(exc, DBAPIError):
        code = _sqlstate(exc)
        message = _diagnostic(exc)
        if code == UNDEFINED_TABLE:
            match = _RELATION_IN_MESSAGE.search(message)
            return RelationMissingError(match.group(1) if match else table, exc)
        if code == UNDEFINED_COLUMN:
            match = _COLUMN_IN_MESSAGE.search(message)
            return SchemaMismatchError(match.group(1) if match else "unknown", exc)
        return PermissionStoreError(
            f"Permission store failure ({code or type(exc.orig).__name__})", exc
        )
    return PermissionStoreError(f"Permission store failure ({type(exc).__name__})", exc)


class SqlPermissionStore(PermissionStore):
    """PostgreSQL implementation of the permission store.

    Reads and upserts rows in the trade_permissions table, selecting the
    current or legacy column set per call.
    """

    def __init__(self, engine: Engine, table: str = "trade_permissions") -> None:
        if not _IDENTIFIER.match(table):
            raise ValueError(f"Invalid table name: {table!r}")
        self._engine = engine
        self._table = table

    def _columns(self, include_mode: bool) -> str:
        if include_mode:
            return "user_id::text AS user_id, permission_mode, buy_enabled, sell_enabled"
        return "user_id::text AS user_id, buy_enabled, sell_enabled"

    def fetch(self, user_id: str, include_mode: bool) -> Optional[PermissionRow]:
        """Return the row for one user, or None if there is none.

        Args:
            user_id: User identifier.
            include_mode: Whether to select the permission_mode column.
        """
        query = text(
            f"SELECT {self._columns(include_mode)} FROM {self._table} "
            "WHERE user_id = :user_id"
        )
        try:
            with self._engine.connect() as conn:
                row = conn.execute(query, {"user_id": user_id}).mappings().first()
        except SQLAlchemyError as exc:
            raise classify_store_error(exc, self._table) from exc

        return _to_row(row) if row is not None else None

    def fetch_many(
        self, user_ids: list[str], include_mode: bool
    ) -> list[PermissionRow]:
        """Return the rows that exist for the given users.

        Args:
            user_ids: User identifiers.
            include_mode: Whether to select the permission_mode column.
        """
        if not user_ids:
            return []

        query = text(
            f"SELECT {self._columns(include_mode)} FROM {self._table} "
            "WHERE user_id IN :user_ids"
        ).bindparams(bindparam("user_ids", expanding=True))
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(query, {"user_ids": list(user_ids)}).mappings().all()
        except SQLAlchemyError as exc:
            raise classify_store_error(exc, self._table) from exc

        logger.debug("Fetched %d permission rows for %d users.", len(rows), len(user_ids))
        return [_to_row(row) for row in rows]

    def upsert(self, row: PermissionRow, include_mode: bool) -> None:
        """Insert or update the row keyed by user_id.

        Args:
            row: Row to write.
            include_mode: Whether to write the permission_mode column.
        """
        if include_mode:
            query = text(
                f"""
                INSERT INTO {self._table}
                    (user_id, permission_mode, buy_enabled, sell_enabled)
                VALUES
                    (:user_id, :permission_mode, :buy_enabled, :sell_enabled)
                ON CONFLICT (user_id) DO UPDATE SET
                    permission_mode = EXCLUDED.permission_mode,
                    buy_enabled = EXCLUDED.buy_enabled,
                    sell_enabled = EXCLUDED.sell_enabled
                """
            )
        else:
            query = text(
                f"""
                INSERT INTO {self._table}
                    (user_id, buy_enabled, sell_enabled)
                VALUES
                    (:user_id, :buy_enabled, :sell_enabled)
                ON CONFLICT (user_id) DO UPDATE SET
                    buy_enabled = EXCLUDED.buy_enabled,
                    sell_enabled = EXCLUDED.sell_enabled
                """
            )

        params = {
            "user_id": row.user_id,
            "buy_enabled": bool(row.buy_enabled),
            "sell_enabled": bool(row.sell_enabled),
        }
        if include_mode:
            params["permission_mode"] = row.permission_mode

        try:
            with self._engine.begin() as conn:
                conn.execute(query, params)
        except SQLAlchemyError as exc:
            raise classify_store_error(exc, self._table) from exc


def _to_row(row) -> PermissionRow:
    return PermissionRow(
        user_id=str(row["user_id"]),
        permission_mode=row.get("permission_mode"),
        buy_enabled=row.get("buy_enabled"),
        sell_enabled=row.get("sell_enabled"),
    )
