"""
Port interfaces (ABCs) for the permissions bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from typing import Optional

from app.domain.permissions.entities import (
    ManagedByFilter,
    ManagedUser,
    PermissionRow,
    TradePermission,
)


class PermissionStore(ABC):
    """Port for the trade_permissions table.

    ``include_mode`` selects between the current shape (with the
    ``permission_mode`` column) and the legacy buy/sell-only shape.

    Implementations raise only the PermissionStoreError family:
    RelationMissingError when the table is absent, SchemaMismatchError
    when a column is absent, and PermissionStoreError for anything else.
    A missing row is not an error.
    """

    @abstractmethod
    def fetch(self, user_id: str, include_mode: bool) -> Optional[PermissionRow]:
        """Return the row for one user, or None if there is none."""
        raise NotImplementedError

    @abstractmethod
    def fetch_many(
        self, user_ids: list[str], include_mode: bool
    ) -> list[PermissionRow]:
        """Return the rows that exist for the given users, in any order."""
        raise NotImplementedError

    @abstractmethod
    def upsert(self, row: PermissionRow, include_mode: bool) -> None:
        """Insert or update the row keyed by ``user_id``."""
        raise NotImplementedError


class FallbackCache(ABC):
    """Port for the process-local store used while the table is absent."""

    @abstractmethod
    def get(self, user_id: str) -> Optional[TradePermission]:
        """Return the last permission written for a user, if any."""
        raise NotImplementedError

    @abstractmethod
    def put(self, user_id: str, permission: TradePermission) -> None:
        """Remember a permission for a user."""
        raise NotImplementedError

    @abstractmethod
    def discard(self, user_id: str) -> None:
        """Forget a user. No-op when absent."""
        raise NotImplementedError

    @abstractmethod
    def __len__(self) -> int:
        raise NotImplementedError


class UserDirectory(ABC):
    """Port for reading user profiles and their managing admin."""

    @abstractmethod
    def list_users(self, managed_by: ManagedByFilter) -> list[ManagedUser]:
        """Return profiles matching the filter, newest first."""
        raise NotImplementedError

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[ManagedUser]:
        """Return one profile, or None if it does not exist."""
        raise NotImplementedError
