"""Stub bearer auth dependency.

Tokens are ``<user_id>`` or ``<user_id>:<role>`` (e.g. ``...:Staff``). A
missing header resolves to a default traveler for local testing. Real token
validation belongs to the identity service in front of this API.
"""

import uuid
from typing import Annotated

from fastapi import Header, HTTPException, status

from backend.planner.db.context import RequestContext
from backend.planner.models.common import Role

DEFAULT_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")


async def get_current_context(
    authorization: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Extract request context from the authorization header.

    Args:
        authorization: Authorization header (e.g., "Bearer <user_id>:Staff")

    Returns:
        RequestContext with user_id and role

    Raises:
        HTTPException: If authorization is invalid
    """
    if not authorization:
        return RequestContext(user_id=DEFAULT_USER_ID)

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization[7:]  # Strip "Bearer "
    user_id_str, _, role_str = token.partition(":")

    try:
        user_id = uuid.UUID(user_id_str)
        role = Role(role_str) if role_str else Role.user
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token format (expected user_id[:role])",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    return RequestContext(user_id=user_id, role=role)
