"""
Tests for the permissions application layer (use cases).

Tests use cases with an in-memory store and a mocked user directory.
Each test verifies orchestration and admin scope, not storage rules.
"""

from unittest.mock import MagicMock

import pytest

from app.application.permissions.admin_access import AdminAccessPolicy
from app.application.permissions.dtos import (
    GetOwnPermissionQuery,
    ListManagedPermissionsQuery,
    PermissionResult,
    SetUserPermissionCommand,
)
from app.application.permissions.get_own_permission import GetOwnPermissionUseCase
from app.application.permissions.list_managed_permissions import (
    ListManagedPermissionsUseCase,
)
from app.application.permissions.set_user_permission import SetUserPermissionUseCase
from app.domain.permissions.entities import (
    AdminIdentity,
    ManagedByFilter,
    ManagedUser,
    PermissionMode,
)
from app.domain.permissions.errors import (
    InvalidPermissionModeError,
    PermissionForbiddenError,
)
from app.domain.permissions.ports import UserDirectory
from app.domain.permissions.resolver import PermissionResolver

ROOT = AdminIdentity(admin_id="root-1", role="superadmin")
SUB = AdminIdentity(admin_id="sub-1", role="sub-admin")


@pytest.fixture
def directory() -> MagicMock:
    users = {
        "u1": ManagedUser(id="u1", username="ann", email="ann@x.io", managed_by="sub-1"),
        "u2": ManagedUser(id="u2", username="bob", email=None, managed_by="sub-2"),
    }
    directory = MagicMock(spec=UserDirectory)
    directory.get_user.side_effect = users.get
    directory.list_users.return_value = list(users.values())
    return directory


@pytest.fixture
def resolver(store, cache) -> PermissionResolver:
    return PermissionResolver(store, cache)


class TestGetOwnPermissionUseCase:
    """Tests for GetOwnPermissionUseCase."""

    def test_returns_default_for_new_user(self, resolver) -> None:
        result = GetOwnPermissionUseCase(resolver).execute(GetOwnPermissionQuery("u9"))
        assert result == PermissionResult("ALL_LOSS", False, False, "default")

    def test_returns_stored_permission(self, resolver) -> None:
        resolver.set("u1", PermissionMode.SELL_ALL_WIN)
        result = GetOwnPermissionUseCase(resolver).execute(GetOwnPermissionQuery("u1"))
        assert result == PermissionResult("SELL_ALL_WIN", False, True, "db")


class TestAdminAccessPolicy:
    """Tests for admin scope rules."""

    def test_root_manages_anyone(self, directory) -> None:
        policy = AdminAccessPolicy(directory)
        assert policy.can_manage(ROOT, "missing-user")
        directory.get_user.assert_not_called()

    def test_sub_admin_manages_own_users_only(self, directory) -> None:
        policy = AdminAccessPolicy(directory)
        assert policy.can_manage(SUB, "u1")
        assert not policy.can_manage(SUB, "u2")
        assert not policy.can_manage(SUB, "missing-user")

    def test_root_roles_are_case_insensitive(self, directory) -> None:
        policy = AdminAccessPolicy(directory, root_roles=frozenset({"Owner"}))
        assert policy.is_root(AdminIdentity(admin_id="x", role="OWNER"))
        assert not policy.is_root(ROOT)


class TestListManagedPermissionsUseCase:
    """Tests for ListManagedPermissionsUseCase."""

    def _use_case(self, directory, resolver) -> ListManagedPermissionsUseCase:
        return ListManagedPermissionsUseCase(
            directory=directory,
            resolver=resolver,
            access=AdminAccessPolicy(directory),
        )

    def test_root_filter_is_passed_through(self, directory, resolver) -> None:
        self._use_case(directory, resolver).execute(
            ListManagedPermissionsQuery(admin=ROOT, managed_by="UNASSIGNED")
        )
        directory.list_users.assert_called_once_with(ManagedByFilter.parse("UNASSIGNED"))

    def test_sub_admin_filter_is_forced(self, directory, resolver) -> None:
        self._use_case(directory, resolver).execute(
            ListManagedPermissionsQuery(admin=SUB, managed_by="ALL")
        )
        directory.list_users.assert_called_once_with(ManagedByFilter.for_manager("sub-1"))

    def test_every_user_has_a_permission(self, directory, resolver, store) -> None:
        resolver.set("u2", PermissionMode.BUY_ALL_WIN)
        store.calls.clear()

        results = self._use_case(directory, resolver).execute(
            ListManagedPermissionsQuery(admin=ROOT)
        )

        assert [r.user_id for r in results] == ["u1", "u2"]
        assert results[0].permission == PermissionResult("ALL_LOSS", False, False, "default")
        assert results[1].permission == PermissionResult("BUY_ALL_WIN", True, False, "db")
        assert results[0].username == "ann"
        assert store.calls == [("fetch_many", True)]

    def test_no_users_skips_store(self, directory, resolver, store) -> None:
        directory.list_users.return_value = []
        assert self._use_case(directory, resolver).execute(
            ListManagedPermissionsQuery(admin=ROOT)
        ) == []
        assert store.calls == []


class TestSetUserPermissionUseCase:
    """Tests for SetUserPermissionUseCase."""

    def test_root_sets_permission(self, directory, resolver) -> None:
        use_case = SetUserPermissionUseCase(resolver, AdminAccessPolicy(directory))

        result = use_case.execute(SetUserPermissionCommand(ROOT, "u2", "RANDOM_WIN_LOSS"))

        assert result == PermissionResult("RANDOM_WIN_LOSS", True, True, "db")

    def test_sub_admin_forbidden_outside_scope(self, directory, resolver, store) -> None:
        use_case = SetUserPermissionUseCase(resolver, AdminAccessPolicy(directory))

        with pytest.raises(PermissionForbiddenError):
            use_case.execute(SetUserPermissionCommand(SUB, "u2", "BUY_ALL_WIN"))
        assert store.rows == {}

    def test_invalid_mode_checked_before_scope(self, directory, resolver) -> None:
        use_case = SetUserPermissionUseCase(resolver, AdminAccessPolicy(directory))

        with pytest.raises(InvalidPermissionModeError):
            use_case.execute(SetUserPermissionCommand(SUB, "u1", "ALWAYS_WIN"))
        directory.get_user.assert_not_called()

    def test_missing_table_reports_memory(self, directory, absent_store, cache) -> None:
        use_case = SetUserPermissionUseCase(
            PermissionResolver(absent_store, cache), AdminAccessPolicy(directory)
        )

        result = use_case.execute(SetUserPermissionCommand(SUB, "u1", "SELL_ALL_WIN"))

        assert result.source == "memory"
        assert len(cache) == 1
