"""
Use case: Set a user's trade permission.

Input: SetUserPermissionCommand (admin, user_id, permission_mode)
Output: PermissionResult
Side effects: Upserts the user's permission row, or the fallback cache
    when the table is absent.
Failure cases: InvalidPermissionModeError, PermissionForbiddenError,
    PermissionStoreError.
"""

import logging

from app.application.permissions.admin_access import AdminAccessPolicy
from app.application.permissions.dtos import (
    PermissionResult,
    SetUserPermissionCommand,
    permission_result,
)
from app.domain.permissions.entities import parse_mode
from app.domain.permissions.errors import (
    InvalidPermissionModeError,
    PermissionForbiddenError,
)
from app.domain.permissions.resolver import PermissionResolver

logger = logging.getLogger(__name__)


class SetUserPermissionUseCase:
    """Orchestrates an admin permission change.

    Validates the mode before checking scope so a malformed request
    never reaches the user directory.
    """

    def __init__(self, resolver: PermissionResolver, access: AdminAccessPolicy) -> None:
        self._resolver = resolver
        self._access = access

    def execute(self, command: SetUserPermissionCommand) -> PermissionResult:
        """Run the use case.

        Args:
            command: The admin, target user and requested mode.

        Returns:
            The stored permission with its source tag.

        Raises:
            InvalidPermissionModeError: If the mode is unknown.
            PermissionForbiddenError: If the admin cannot manage the user.
        """
        mode = parse_mode(command.permission_mode)
        if mode is None:
            raise InvalidPermissionModeError(command.permission_mode)

        if not self._access.can_manage(command.admin, command.user_id):
            raise PermissionForbiddenError(command.admin.admin_id, command.user_id)

        permission = self._resolver.set(command.user_id, mode)
        logger.info(
            "Admin %s set user=%s to %s (source=%s)",
            command.admin.admin_id,
            command.user_id,
            mode.value,
            permission.source.value,
        )
        return permission_result(permission)
