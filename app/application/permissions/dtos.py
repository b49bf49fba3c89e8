"""
Data Transfer Objects for the permissions application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior.
"""

from dataclasses import dataclass
from typing import Optional

from app.domain.permissions.entities import AdminIdentity, TradePermission


@dataclass(frozen=True)
class GetOwnPermissionQuery:
    """Input DTO for reading the caller's own trade permission.

    Attributes:
        user_id: Authenticated user identifier.
    """

    user_id: str


@dataclass(frozen=True)
class PermissionResult:
    """Output DTO for a resolved trade permission.

    Attributes:
        permission_mode: One of the four mode names.
        buy_enabled: Derived buy flag.
        sell_enabled: Derived sell flag.
        source: Provenance tag (db, memory, default).
    """

    permission_mode: str
    buy_enabled: bool
    sell_enabled: bool
    source: str


@dataclass(frozen=True)
class ListManagedPermissionsQuery:
    """Input DTO for the admin permission listing.

    Attributes:
        admin: The authenticated administrator.
        managed_by: Raw ``managedBy`` filter (ALL, UNASSIGNED or an admin id).
            Ignored for sub-admins, who only ever see their own users.
    """

    admin: AdminIdentity
    managed_by: Optional[str] = None


@dataclass(frozen=True)
class ManagedPermissionResult:
    """Output DTO for one row of the admin permission listing."""

    user_id: str
    username: Optional[str]
    email: Optional[str]
    permission: PermissionResult


@dataclass(frozen=True)
class SetUserPermissionCommand:
    """Input DTO for setting a user's trade permission.

    Attributes:
        admin: The authenticated administrator.
        user_id: Target user identifier.
        permission_mode: Requested mode name.
    """

    admin: AdminIdentity
    user_id: str
    permission_mode: str


def permission_result(permission: TradePermission) -> PermissionResult:
    """Map a domain permission to its output DTO."""
    return PermissionResult(
        permission_mode=permission.permission_mode.value,
        buy_enabled=permission.buy_enabled,
        sell_enabled=permission.sell_enabled,
        source=permission.source.value,
    )
