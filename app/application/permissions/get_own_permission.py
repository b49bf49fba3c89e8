"""
Use case: Read the caller's own trade permission.

Input: GetOwnPermissionQuery (user_id)
Output: PermissionResult
Side effects: None (read-only query).
Failure cases: PermissionStoreError on non-structural storage failures.
"""

import logging

from app.application.permissions.dtos import (
    GetOwnPermissionQuery,
    PermissionResult,
    permission_result,
)
from app.domain.permissions.resolver import PermissionResolver

logger = logging.getLogger(__name__)


class GetOwnPermissionUseCase:
    """Orchestrates resolving the permission of an authenticated user."""

    def __init__(self, resolver: PermissionResolver) -> None:
        self._resolver = resolver

    def execute(self, query: GetOwnPermissionQuery) -> PermissionResult:
        """Run the use case.

        Args:
            query: Identifies the authenticated user.

        Returns:
            The user's permission with its source tag.
        """
        permission = self._resolver.resolve(query.user_id)
        logger.debug(
            "Resolved permission for user=%s: mode=%s source=%s",
            query.user_id,
            permission.permission_mode.value,
            permission.source.value,
        )
        return permission_result(permission)
