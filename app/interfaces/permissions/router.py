"""
FastAPI router for the permissions bounded context.

All routes delegate to use cases. No business logic here.
Input validation is handled by Pydantic schemas.
Error mapping is handled by centralized error handlers.
"""

from fastapi import APIRouter, Depends, Query, Request

from app.application.permissions.dtos import (
    GetOwnPermissionQuery,
    ListManagedPermissionsQuery,
    SetUserPermissionCommand,
)
from app.application.permissions.get_own_permission import GetOwnPermissionUseCase
from app.application.permissions.list_managed_permissions import (
    ListManagedPermissionsUseCase,
)
from app.application.permissions.set_user_permission import SetUserPermissionUseCase
from app.domain.permissions.entities import AdminIdentity
from app.interfaces.permissions.dependencies import (
    get_current_admin,
    get_current_user_id,
    get_list_managed_permissions_use_case,
    get_own_permission_use_case,
    get_set_user_permission_use_case,
)
from app.interfaces.permissions.schemas import (
    ErrorResponse,
    ManagedPermissionsResponse,
    ManagedUserPermissionItem,
    PermissionResponse,
    SetPermissionRequest,
    SetPermissionResponse,
)
from app.shared.security.rate_limiting import ADMIN_RATE_LIMIT, limiter

router = APIRouter(tags=["permissions"])

_AUTH_ERRORS = {401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
_ADMIN_ERRORS = {**_AUTH_ERRORS, 403: {"model": ErrorResponse}}


@router.get(
    "/trade/permission",
    response_model=PermissionResponse,
    responses=_AUTH_ERRORS,
    summary="Get own trade permission",
    description="Return the trade permission of the authenticated user.",
)
def get_own_permission(
    user_id: str = Depends(get_current_user_id),
    use_case: GetOwnPermissionUseCase = Depends(get_own_permission_use_case),
) -> PermissionResponse:
    """Return the caller's permission mode, derived flags and source."""
    result = use_case.execute(GetOwnPermissionQuery(user_id=user_id))
    return PermissionResponse(
        permission_mode=result.permission_mode,
        buy_enabled=result.buy_enabled,
        sell_enabled=result.sell_enabled,
        source=result.source,
    )


@router.get(
    "/admin/trade-permission",
    response_model=ManagedPermissionsResponse,
    responses=_ADMIN_ERRORS,
    summary="List user trade permissions",
    description=(
        "List users visible to the admin with their trade permissions. "
        "Root admins may filter with managedBy=ALL|UNASSIGNED|<admin id>."
    ),
)
@limiter.limit(ADMIN_RATE_LIMIT)
def list_permissions(
    request: Request,
    managed_by: str | None = Query(default=None, alias="managedBy", max_length=128),
    admin: AdminIdentity = Depends(get_current_admin),
    use_case: ListManagedPermissionsUseCase = Depends(
        get_list_managed_permissions_use_case
    ),
) -> ManagedPermissionsResponse:
    """List managed users and their permissions."""
    results = use_case.execute(
        ListManagedPermissionsQuery(admin=admin, managed_by=managed_by)
    )
    return ManagedPermissionsResponse(
        users=[
            ManagedUserPermissionItem(
                id=r.user_id,
                username=r.username,
                email=r.email,
                permission_mode=r.permission.permission_mode,
                buy_enabled=r.permission.buy_enabled,
                sell_enabled=r.permission.sell_enabled,
                source=r.permission.source,
            )
            for r in results
        ]
    )


@router.post(
    "/admin/trade-permission",
    response_model=SetPermissionResponse,
    responses=_ADMIN_ERRORS,
    summary="Set a user's trade permission",
    description="Upsert the trade permission mode of a user the admin manages.",
)
@limiter.limit(ADMIN_RATE_LIMIT)
def set_permission(
    request: Request,
    body: SetPermissionRequest,
    admin: AdminIdentity = Depends(get_current_admin),
    use_case: SetUserPermissionUseCase = Depends(get_set_user_permission_use_case),
) -> SetPermissionResponse:
    """Set a user's permission mode."""
    result = use_case.execute(
        SetUserPermissionCommand(
            admin=admin,
            user_id=body.user_id,
            permission_mode=body.permission_mode,
        )
    )
    return SetPermissionResponse(
        user_id=body.user_id,
        permission_mode=result.permission_mode,
        buy_enabled=result.buy_enabled,
        sell_enabled=result.sell_enabled,
        source=result.source,
    )
