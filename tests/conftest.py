"""
Shared fixtures for the permission tests.

Environment overrides are applied before the application package is
imported so the module-level settings pick them up.
"""

import os

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Optional  # noqa: E402

import pytest  # noqa: E402

from app.domain.permissions.entities import PermissionRow  # noqa: E402
from app.domain.permissions.errors import (  # noqa: E402
    PermissionStoreError,
    RelationMissingError,
    SchemaMismatchError,
)
from app.domain.permissions.ports import PermissionStore  # noqa: E402
from app.infrastructure.permissions.fallback_cache import LruFallbackCache  # noqa: E402

CURRENT = "current"
LEGACY = "legacy"
ABSENT = "absent"


class FakePermissionStore(PermissionStore):
    """In-memory PermissionStore that can play each schema stage.

    Stages:
        current — table with permission_mode
        legacy  — table without permission_mode
        absent  — no table at all

    ``failure`` makes every call raise that error instead.
    """

    def __init__(self, stage: str = CURRENT) -> None:
        self.stage = stage
        self.rows: dict[str, PermissionRow] = {}
        self.failure: Optional[PermissionStoreError] = None
        self.calls: list[tuple[str, bool]] = []

    def _check(self, operation: str, include_mode: bool) -> None:
        self.calls.append((operation, include_mode))
        if self.failure is not None:
            raise self.failure
        if self.stage == ABSENT:
            raise RelationMissingError("trade_permissions")
        if self.stage == LEGACY and include_mode:
            raise SchemaMismatchError("permission_mode")

    def _shape(self, row: PermissionRow, include_mode: bool) -> PermissionRow:
        if include_mode:
            return row
        return PermissionRow(
            user_id=row.user_id,
            buy_enabled=row.buy_enabled,
            sell_enabled=row.sell_enabled,
        )

    def fetch(self, user_id: str, include_mode: bool) -> Optional[PermissionRow]:
        self._check("fetch", include_mode)
        row = self.rows.get(user_id)
        return self._shape(row, include_mode) if row is not None else None

    def fetch_many(self, user_ids: list[str], include_mode: bool) -> list[PermissionRow]:
        self._check("fetch_many", include_mode)
        return [
            self._shape(self.rows[uid], include_mode)
            for uid in user_ids
            if uid in self.rows
        ]

    def upsert(self, row: PermissionRow, include_mode: bool) -> None:
        self._check("upsert", include_mode)
        previous = self.rows.get(row.user_id)
        mode = row.permission_mode if include_mode else None
        if mode is None and previous is not None and self.stage == CURRENT:
            mode = previous.permission_mode
        self.rows[row.user_id] = PermissionRow(
            user_id=row.user_id,
            permission_mode=mode,
            buy_enabled=row.buy_enabled,
            sell_enabled=row.sell_enabled,
        )


@pytest.fixture
def store() -> FakePermissionStore:
    return FakePermissionStore()


@pytest.fixture
def cache() -> LruFallbackCache:
    return LruFallbackCache(maxsize=100)


@pytest.fixture
def legacy_store() -> FakePermissionStore:
    return FakePermissionStore(stage=LEGACY)


@pytest.fixture
def absent_store() -> FakePermissionStore:
    return FakePermissionStore(stage=ABSENT)
