"""
Domain-specific errors for the permissions bounded context.

All errors raised from the domain layer must be defined here.
These are mapped to HTTP responses at the interface layer.
No framework imports allowed.

Storage adapters translate driver failures into the PermissionStoreError
family at the point where the driver error is raised, so the resolver can
pick a fallback tier from the error type alone.
"""

from typing import Optional


class PermissionDomainError(Exception):
    """Base error for all permission domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class InvalidPermissionModeError(PermissionDomainError):
    """Raised when a write names a mode outside the four known modes."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid permission mode: {value!r}")
        self.value = value


class InvalidUserIdError(PermissionDomainError):
    """Raised when a user identifier is empty."""

    def __init__(self) -> None:
        super().__init__("User id must be a non-empty string")


class AuthenticationError(PermissionDomainError):
    """Raised when the caller could not be authenticated."""

    def __init__(self, reason: str = "missing or invalid credentials") -> None:
        super().__init__(f"Authentication failed: {reason}")
        self.reason = reason


class PermissionForbiddenError(PermissionDomainError):
    """Raised when an admin acts on a user outside its management scope."""

    def __init__(self, admin_id: str, user_id: str) -> None:
        super().__init__(f"Admin {admin_id} cannot manage user {user_id}")
        self.admin_id = admin_id
        self.user_id = user_id


class PermissionStoreError(PermissionDomainError):
    """A storage failure that is not a structural absence.

    Never recovered from inside the resolver.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class RelationMissingError(PermissionStoreError):
    """The backing table does not exist (not migrated yet)."""

    def __init__(self, relation: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Relation does not exist: {relation}", cause)
        self.relation = relation


class SchemaMismatchError(PermissionStoreError):
    """A column the query relies on does not exist."""

    def __init__(self, column: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Column does not exist: {column}", cause)
        self.column = column
