"""
Admin scope rules shared by the admin permission use cases.

Root admins manage every user. Sub-admins manage only users whose
profile names them in ``managed_by``.
"""

from app.domain.permissions.entities import AdminIdentity
from app.domain.permissions.ports import UserDirectory

DEFAULT_ROOT_ROLES = frozenset({"admin", "superadmin"})


class AdminAccessPolicy:
    """Decides which users an administrator may see and manage."""

    def __init__(
        self,
        directory: UserDirectory,
        root_roles: frozenset[str] = DEFAULT_ROOT_ROLES,
    ) -> None:
        self._directory = directory
        self._root_roles = frozenset(role.lower() for role in root_roles)

    def is_root(self, admin: AdminIdentity) -> bool:
        return admin.role.lower() in self._root_roles

    def can_manage(self, admin: AdminIdentity, user_id: str) -> bool:
        """Return True when ``admin`` may change ``user_id``'s permission."""
        if self.is_root(admin):
            return True
        user = self._directory.get_user(user_id)
        return user is not None and user.managed_by == admin.admin_id
