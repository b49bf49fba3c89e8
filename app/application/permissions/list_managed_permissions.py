"""
Use case: List users with their trade permissions for an admin dashboard.

Input: ListManagedPermissionsQuery (admin, optional managed_by filter)
Output: list[ManagedPermissionResult]
Side effects: None (read-only query).
Failure cases: PermissionStoreError on non-structural storage failures.
"""

import logging

from app.application.permissions.admin_access import AdminAccessPolicy
from app.application.permissions.dtos import (
    ListManagedPermissionsQuery,
    ManagedPermissionResult,
    permission_result,
)
from app.domain.permissions.entities import ManagedByFilter
from app.domain.permissions.ports import UserDirectory
from app.domain.permissions.resolver import PermissionResolver

logger = logging.getLogger(__name__)


class ListManagedPermissionsUseCase:
    """Orchestrates the admin permission listing.

    Sub-admins are always restricted to the users they manage. Root
    admins may filter by manager, by unassigned users, or see everyone.
    Permissions for the whole page are resolved in one batch.
    """

    def __init__(
        self,
        directory: UserDirectory,
        resolver: PermissionResolver,
        access: AdminAccessPolicy,
    ) -> None:
        self._directory = directory
        self._resolver = resolver
        self._access = access

    def execute(self, query: ListManagedPermissionsQuery) -> list[ManagedPermissionResult]:
        """Run the listing use case.

        Args:
            query: The admin and its requested filter.

        Returns:
            One entry per visible user, in directory order.
        """
        if self._access.is_root(query.admin):
            managed_by = ManagedByFilter.parse(query.managed_by)
        else:
            managed_by = ManagedByFilter.for_manager(query.admin.admin_id)

        logger.info(
            "Listing permissions: admin=%s role=%s filter=%s",
            query.admin.admin_id,
            query.admin.role,
            managed_by.kind,
        )

        users = self._directory.list_users(managed_by)
        permissions = self._resolver.resolve_many(user.id for user in users)

        return [
            ManagedPermissionResult(
                user_id=user.id,
                username=user.username,
                email=user.email,
                permission=permission_result(permissions[user.id]),
            )
            for user in users
        ]
