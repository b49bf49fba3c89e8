"""
Dependency injection for the permissions bounded context.

Provides FastAPI dependency functions that wire infrastructure
adapters into use cases via constructor injection.
These are the composition root for the permissions context.

The engine and the fallback cache are process-wide singletons; the
cache must outlive individual requests to be of any use.
"""

from functools import lru_cache

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from app.application.permissions.admin_access import AdminAccessPolicy
from app.application.permissions.get_own_permission import GetOwnPermissionUseCase
from app.application.permissions.list_managed_permissions import (
    ListManagedPermissionsUseCase,
)
from app.application.permissions.set_user_permission import SetUserPermissionUseCase
from app.core.config import settings
from app.domain.permissions.entities import AdminIdentity
from app.domain.permissions.ports import FallbackCache, UserDirectory
from app.domain.permissions.resolver import PermissionResolver
from app.infrastructure.permissions.fallback_cache import LruFallbackCache
from app.infrastructure.permissions.permission_store import SqlPermissionStore
from app.infrastructure.permissions.user_directory import SqlUserDirectory
from app.shared.security.auth import admin_from_token, user_id_from_token

_bearer = HTTPBearer(auto_error=False)


@lru_cache(maxsize=1)
def get_db_engine() -> Engine:
    """Build the SQLAlchemy engine once per process."""
    return create_engine(settings.get_database_dsn(), pool_pre_ping=True)


@lru_cache(maxsize=1)
def get_fallback_cache() -> FallbackCache:
    """Return the process-wide fallback cache."""
    return LruFallbackCache(maxsize=settings.fallback_cache_size)


def get_permission_resolver() -> PermissionResolver:
    """Build a PermissionResolver over the configured table."""
    return PermissionResolver(
        store=SqlPermissionStore(get_db_engine(), table=settings.permission_table),
        cache=get_fallback_cache(),
    )


def get_user_directory() -> UserDirectory:
    """Build the profiles-backed user directory."""
    return SqlUserDirectory(get_db_engine(), table=settings.profiles_table)


def get_admin_access_policy(
    directory: UserDirectory = Depends(get_user_directory),
) -> AdminAccessPolicy:
    """Build the admin scope policy."""
    return AdminAccessPolicy(directory, root_roles=settings.root_admin_roles)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> str:
    """Return the authenticated user id from the bearer token."""
    return user_id_from_token(credentials.credentials if credentials else "")


def get_current_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> AdminIdentity:
    """Return the authenticated administrator from the bearer token."""
    return admin_from_token(credentials.credentials if credentials else "")


def get_own_permission_use_case(
    resolver: PermissionResolver = Depends(get_permission_resolver),
) -> GetOwnPermissionUseCase:
    """Build GetOwnPermissionUseCase with its infrastructure dependencies."""
    return GetOwnPermissionUseCase(resolver=resolver)


def get_list_managed_permissions_use_case(
    directory: UserDirectory = Depends(get_user_directory),
    resolver: PermissionResolver = Depends(get_permission_resolver),
    access: AdminAccessPolicy = Depends(get_admin_access_policy),
) -> ListManagedPermissionsUseCase:
    """Build ListManagedPermissionsUseCase with its infrastructure dependencies."""
    return ListManagedPermissionsUseCase(
        directory=directory,
        resolver=resolver,
        access=access,
    )


def get_set_user_permission_use_case(
    resolver: PermissionResolver = Depends(get_permission_resolver),
    access: AdminAccessPolicy = Depends(get_admin_access_policy),
) -> SetUserPermissionUseCase:
    """Build SetUserPermissionUseCase with its infrastructure dependencies."""
    return SetUserPermissionUseCase(resolver=resolver, access=access)
