"""
Domain service: Trade permission resolution.

Answers "which trade permission applies to this user" and persists new
permissions while the trade_permissions table may still be on its legacy
shape or may not exist at all.

Every call walks the same tiers, strictly forward:

    CURRENT  — table with the permission_mode column
    LEGACY   — table with buy_enabled / sell_enabled only
    MEMORY   — injected process-local cache

A missing permission_mode column moves CURRENT to LEGACY. A missing table
moves either tier to MEMORY. Any other store failure is fatal and
propagates unchanged.
"""

import logging
from enum import Enum
from typing import Iterable, Union

from app.domain.permissions.entities import (
    PermissionMode,
    PermissionRow,
    PermissionSource,
    TradePermission,
    default_permission,
    normalize_row,
    parse_mode,
)
from app.domain.permissions.errors import (
    InvalidPermissionModeError,
    InvalidUserIdError,
    PermissionStoreError,
    RelationMissingError,
    SchemaMismatchError,
)
from app.domain.permissions.ports import FallbackCache, PermissionStore

logger = logging.getLogger(__name__)

MODE_COLUMN = "permission_mode"


class _Tier(Enum):
    CURRENT = 1
    LEGACY = 2
    MEMORY = 3


class PermissionResolver:
    """Reads and writes trade permissions with tiered fallback.

    The resolver performs no authorization. Callers pass identifiers
    they have already authenticated.
    """

    def __init__(self, store: PermissionStore, cache: FallbackCache) -> None:
        """Initialize the resolver.

        Args:
            store: Durable permission storage.
            cache: Process-local store used only when the table is absent.
        """
        self._store = store
        self._cache = cache

    def resolve(self, user_id: str) -> TradePermission:
        """Return the permission that applies to one user.

        Args:
            user_id: Authenticated user identifier.

        Returns:
            The normalized permission tagged with its source.

        Raises:
            InvalidUserIdError: If ``user_id`` is empty.
            PermissionStoreError: On any failure other than a missing
                table or a missing permission_mode column.
        """
        user_id = _require_user_id(user_id)
        tier = _Tier.CURRENT
        while tier is not _Tier.MEMORY:
            try:
                row = self._store.fetch(user_id, include_mode=tier is _Tier.CURRENT)
            except PermissionStoreError as exc:
                tier = self._advance(tier, exc, "resolve", user_id)
                continue
            if row is None:
                logger.debug("No permission row for user=%s, using default.", user_id)
                return default_permission()
            return normalize_row(row, PermissionSource.DB)
        return self._from_memory(user_id)

    def resolve_many(self, user_ids: Iterable[str]) -> dict[str, TradePermission]:
        """Return the permission for each user, one batched read per tier.

        Every requested id appears exactly once in the result. Users
        without a stored row receive the default permission.

        Args:
            user_ids: Authenticated user identifiers. Duplicates collapse.

        Returns:
            Mapping of user id to permission.
        """
        ids = list(dict.fromkeys(_require_user_id(uid) for uid in user_ids))
        if not ids:
            return {}

        tier = _Tier.CURRENT
        while tier is not _Tier.MEMORY:
            try:
                rows = self._store.fetch_many(ids, include_mode=tier is _Tier.CURRENT)
            except PermissionStoreError as exc:
                tier = self._advance(tier, exc, "resolve_many", f"{len(ids)} users")
                continue
            found = {str(row.user_id): normalize_row(row, PermissionSource.DB) for row in rows}
            return {uid: found.get(uid) or default_permission() for uid in ids}
        return {uid: self._from_memory(uid) for uid in ids}

    def set(
        self, user_id: str, mode: Union[PermissionMode, str]
    ) -> TradePermission:
        """Persist a new permission for a user.

        Writes the full mode/buy/sell triple, retries with the legacy
        buy/sell pair when the mode column is missing, and keeps the value
        in the fallback cache when the table is missing.

        Args:
            user_id: Target user identifier.
            mode: One of the four permission modes.

        Returns:
            The stored permission; source is ``db`` for a durable write and
            ``memory`` when only the cache could hold it.

        Raises:
            InvalidUserIdError: If ``user_id`` is empty.
            InvalidPermissionModeError: If ``mode`` is not a known mode.
            PermissionStoreError: On any failure other than a missing
                table or a missing permission_mode column.
        """
        user_id = _require_user_id(user_id)
        parsed = parse_mode(mode)
        if parsed is None:
            raise InvalidPermissionModeError(mode)

        permission = TradePermission.from_mode(parsed, PermissionSource.DB)
        tier = _Tier.CURRENT
        while tier is not _Tier.MEMORY:
            include_mode = tier is _Tier.CURRENT
            row = PermissionRow(
                user_id=user_id,
                permission_mode=parsed.value if include_mode else None,
                buy_enabled=permission.buy_enabled,
                sell_enabled=permission.sell_enabled,
            )
            try:
                self._store.upsert(row, include_mode=include_mode)
            except PermissionStoreError as exc:
                tier = self._advance(tier, exc, "set", user_id)
                continue
            self._cache.discard(user_id)
            logger.info(
                "Stored permission for user=%s: mode=%s (%s schema).",
                user_id,
                parsed.value,
                tier.name.lower(),
            )
            return permission

        permission = permission.with_source(PermissionSource.MEMORY)
        self._cache.put(user_id, permission)
        logger.warning(
            "Permission for user=%s kept in memory only: mode=%s.",
            user_id,
            parsed.value,
        )
        return permission

    def _advance(
        self, tier: _Tier, exc: PermissionStoreError, operation: str, subject: str
    ) -> _Tier:
        """Pick the next tier for a store failure, or re-raise it."""
        if isinstance(exc, RelationMissingError):
            logger.warning(
                "%s for %s: table %s missing, falling back to memory.",
                operation,
                subject,
                exc.relation,
            )
            return _Tier.MEMORY
        if (
            tier is _Tier.CURRENT
            and isinstance(exc, SchemaMismatchError)
            and exc.column == MODE_COLUMN
        ):
            logger.warning(
                "%s for %s: column %s missing, using legacy schema.",
                operation,
                subject,
                MODE_COLUMN,
            )
            return _Tier.LEGACY
        logger.error("%s for %s failed: %s", operation, subject, exc.message)
        raise exc

    def _from_memory(self, user_id: str) -> TradePermission:
        cached = self._cache.get(user_id)
        if cached is None:
            return default_permission()
        return cached.with_source(PermissionSource.MEMORY)


def _require_user_id(user_id: str) -> str:
    if not isinstance(user_id, str) or not user_id.strip():
        raise InvalidUserIdError()
    return user_id
