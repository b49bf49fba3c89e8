"""
Pydantic schemas for permission API request/response validation.

These schemas enforce input validation and define the API contract.
Wire field names are camelCase; Python attributes stay snake_case.
No business logic belongs here.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

PermissionModeName = Literal["BUY_ALL_WIN", "SELL_ALL_WIN", "RANDOM_WIN_LOSS", "ALL_LOSS"]
PermissionSourceName = Literal["db", "memory", "default"]

USER_ID_MAX_LEN = 128


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SetPermissionRequest(_CamelModel):
    """Request schema for the admin permission update.

    Attributes:
        user_id: Target user identifier (non-blank).
        permission_mode: One of the four modes; case and surrounding
            whitespace are ignored.
    """

    user_id: str = Field(
        ...,
        alias="userId",
        min_length=1,
        max_length=USER_ID_MAX_LEN,
        description="Target user identifier",
    )
    permission_mode: PermissionModeName = Field(
        ..., alias="permissionMode", description="Trade permission mode"
    )

    @field_validator("user_id", mode="before")
    @classmethod
    def _strip_user_id(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("permission_mode", mode="before")
    @classmethod
    def _normalize_mode(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value


class PermissionResponse(_CamelModel):
    """Response schema for a resolved permission."""

    ok: bool = True
    permission_mode: PermissionModeName = Field(..., alias="permissionMode")
    buy_enabled: bool = Field(..., alias="buyEnabled")
    sell_enabled: bool = Field(..., alias="sellEnabled")
    source: PermissionSourceName


class SetPermissionResponse(PermissionResponse):
    """Response schema for the admin permission update."""

    user_id: str = Field(..., alias="userId")


class ManagedUserPermissionItem(_CamelModel):
    """A single user row in the admin permission listing."""

    id: str
    username: str | None = None
    email: str | None = None
    permission_mode: PermissionModeName = Field(..., alias="permissionMode")
    buy_enabled: bool = Field(..., alias="buyEnabled")
    sell_enabled: bool = Field(..., alias="sellEnabled")
    source: PermissionSourceName


class ManagedPermissionsResponse(BaseModel):
    """Response schema for the admin permission listing."""

    users: list[ManagedUserPermissionItem]


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    fallback_cache_entries: int = 0


class ErrorResponse(BaseModel):
    """Standard error response returned by all error handlers."""

    error: str
    detail: str | None = None
