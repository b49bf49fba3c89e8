"""
Domain entities for the permissions bounded context.

Entities represent core business objects with identity and lifecycle.
They contain no framework imports and no IO operations.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class PermissionMode(Enum):
    """Outcome policy applied to a user's simulated orders."""

    BUY_ALL_WIN = "BUY_ALL_WIN"
    SELL_ALL_WIN = "SELL_ALL_WIN"
    RANDOM_WIN_LOSS = "RANDOM_WIN_LOSS"
    ALL_LOSS = "ALL_LOSS"


class PermissionSource(Enum):
    """Where a resolved permission came from. Never persisted."""

    DB = "db"
    MEMORY = "memory"
    DEFAULT = "default"


_MODE_FLAGS: dict[PermissionMode, tuple[bool, bool]] = {
    PermissionMode.BUY_ALL_WIN: (True, False),
    PermissionMode.SELL_ALL_WIN: (False, True),
    PermissionMode.RANDOM_WIN_LOSS: (True, True),
    PermissionMode.ALL_LOSS: (False, False),
}

_FLAGS_MODE: dict[tuple[bool, bool], PermissionMode] = {
    flags: mode for mode, flags in _MODE_FLAGS.items()
}


def mode_to_flags(mode: PermissionMode) -> tuple[bool, bool]:
    """Return the ``(buy_enabled, sell_enabled)`` pair for a mode."""
    return _MODE_FLAGS[mode]


def mode_from_flags(buy_enabled: bool, sell_enabled: bool) -> PermissionMode:
    """Reconstruct a mode from legacy buy/sell booleans.

    ``(False, False)`` maps to ALL_LOSS.
    """
    return _FLAGS_MODE[(bool(buy_enabled), bool(sell_enabled))]


def parse_mode(value: Any) -> Optional[PermissionMode]:
    """Parse a raw mode value, returning None when it is not recognized.

    Accepts PermissionMode members and strings in any case with
    surrounding whitespace.
    """
    if isinstance(value, PermissionMode):
        return value
    if value is None:
        return None
    raw = str(value).strip().upper()
    try:
        return PermissionMode(raw)
    except ValueError:
        return None


@dataclass(frozen=True)
class PermissionRow:
    """A trade_permissions row as read from or written to storage.

    ``permission_mode`` holds the raw column value and is None when the
    column is absent (legacy schema) or NULL.
    """

    user_id: str
    permission_mode: Optional[str] = None
    buy_enabled: Optional[bool] = None
    sell_enabled: Optional[bool] = None


@dataclass(frozen=True)
class TradePermission:
    """The trade permission that applies to one user.

    ``buy_enabled`` and ``sell_enabled`` are always derived from
    ``permission_mode``.
    """

    permission_mode: PermissionMode
    buy_enabled: bool
    sell_enabled: bool
    source: PermissionSource

    @classmethod
    def from_mode(
        cls, mode: PermissionMode, source: PermissionSource
    ) -> "TradePermission":
        """Build a permission whose flags follow the mode."""
        buy_enabled, sell_enabled = mode_to_flags(mode)
        return cls(
            permission_mode=mode,
            buy_enabled=buy_enabled,
            sell_enabled=sell_enabled,
            source=source,
        )

    def with_source(self, source: PermissionSource) -> "TradePermission":
        """Return the same permission tagged with another source."""
        return TradePermission.from_mode(self.permission_mode, source)

    def to_dict(self) -> dict[str, Any]:
        """Render the camelCase wire shape."""
        return {
            "permissionMode": self.permission_mode.value,
            "buyEnabled": self.buy_enabled,
            "sellEnabled": self.sell_enabled,
            "source": self.source.value,
        }


def normalize_row(
    row: Optional[PermissionRow], source: PermissionSource = PermissionSource.DB
) -> TradePermission:
    """Normalize a stored row into a TradePermission.

    The mode column wins when it parses. Otherwise the mode is rebuilt
    from the booleans, treating missing values as False.
    """
    mode = parse_mode(row.permission_mode) if row is not None else None
    if mode is None:
        buy_enabled = bool(row.buy_enabled) if row is not None else False
        sell_enabled = bool(row.sell_enabled) if row is not None else False
        mode = mode_from_flags(buy_enabled, sell_enabled)
    return TradePermission.from_mode(mode, source)


def default_permission() -> TradePermission:
    """Return the permission applied to users with no stored record."""
    return normalize_row(None, PermissionSource.DEFAULT)


@dataclass(frozen=True)
class AdminIdentity:
    """An authenticated administrator and the role it acts under."""

    admin_id: str
    role: str


@dataclass(frozen=True)
class ManagedUser:
    """A user profile as seen from the admin dashboards."""

    id: str
    username: Optional[str] = None
    email: Optional[str] = None
    managed_by: Optional[str] = None


@dataclass(frozen=True)
class ManagedByFilter:
    """Filter over the ``managed_by`` column of user profiles.

    Kinds:
        all        — every user
        unassigned — users with no manager
        manager    — users managed by ``manager_id``
    """

    kind: str
    manager_id: Optional[str] = None

    ALL = "all"
    UNASSIGNED = "unassigned"
    MANAGER = "manager"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "ManagedByFilter":
        """Parse the ``managedBy`` query value used by the dashboards."""
        value = (raw or "").strip()
        if not value or value.upper() == "ALL":
            return cls(kind=cls.ALL)
        if value.upper() == "UNASSIGNED":
            return cls(kind=cls.UNASSIGNED)
        return cls(kind=cls.MANAGER, manager_id=value)

    @classmethod
    def for_manager(cls, manager_id: str) -> "ManagedByFilter":
        return cls(kind=cls.MANAGER, manager_id=manager_id)
