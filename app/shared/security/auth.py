"""
Bearer token verification.

Verifies HS256 JWTs issued by the identity provider and extracts the
caller identity. Tokens are never logged.
"""

import logging
from typing import Any

import jwt

from app.core.config import settings
from app.domain.permissions.entities import AdminIdentity
from app.domain.permissions.errors import AuthenticationError

logger = logging.getLogger(__name__)

ADMIN_ROLE_CLAIMS = ("admin_role", "role")


def decode_token(token: str) -> dict[str, Any]:
    """Verify a bearer token and return its claims.

    Args:
        token: The raw JWT from the Authorization header.

    Returns:
        The decoded claims; ``sub`` and ``exp`` are guaranteed present.

    Raises:
        AuthenticationError: If the token is missing, expired, malformed,
            signed with another key or issued for another audience.
    """
    if not token:
        raise AuthenticationError("missing bearer token")
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationError("token expired") from exc
    except jwt.InvalidTokenError as exc:
        logger.debug("Rejected bearer token: %s", type(exc).__name__)
        raise AuthenticationError("invalid token") from exc

    if not str(claims.get("sub") or "").strip():
        raise AuthenticationError("token has no subject")
    return claims


def user_id_from_token(token: str) -> str:
    """Return the authenticated user id carried by a bearer token."""
    return str(decode_token(token)["sub"]).strip()


def admin_from_token(token: str) -> AdminIdentity:
    """Return the administrator carried by a bearer token.

    The role is read from ``admin_role`` first, then ``role``, and must be
    one of the configured admin roles.

    Raises:
        AuthenticationError: If the token is invalid or carries no admin role.
    """
    claims = decode_token(token)
    for claim in ADMIN_ROLE_CLAIMS:
        role = str(claims.get(claim) or "").strip().lower()
        if role in settings.admin_roles:
            return AdminIdentity(admin_id=str(claims["sub"]).strip(), role=role)
    raise AuthenticationError("token carries no admin role")
