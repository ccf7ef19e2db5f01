"""
API Dependencies

Reusable dependencies for API routes including authentication and role checks.
"""

import uuid
from typing import Annotated, Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core.database import get_db
from learnhub.core.security import decode_access_token
from learnhub.models.enums import UserRole
from learnhub.models.user import User


# Tokens are issued by the identity service sharing SECRET_KEY; this app
# only reads them from the Authorization header.
bearer_scheme = HTTPBearer(auto_error=False)

Credentials = Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)]


async def _user_from_token(token: str, db: AsyncSession) -> Optional[User]:
    payload = decode_access_token(token)
    if payload is None:
        return None

    user_id_str: str | None = payload.get("sub")
    if user_id_str is None:
        return None

    try:
        user_id = uuid.UUID(user_id_str)
    except ValueError:
        return None

    result = await db.execute(
        select(User).where(User.id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_current_user(
    credentials: Credentials,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Dependency to get the current authenticated user.

    This dependency:
    1. Extracts the JWT token from the Authorization header
    2. Decodes and validates the token
    3. Fetches the user from the database
    4. Raises 401 if token is invalid or user not found

    Args:
        credentials: Bearer credentials from the Authorization header.
        db: Database session (auto-injected).

    Returns:
        User: The authenticated user object.

    Raises:
        HTTPException: 401 if authentication fails.
    """
    user = None
    if credentials is not None:
        user = await _user_from_token(credentials.credentials, db)

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


async def get_current_active_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """
    Dependency to get the current active user.

    Raises:
        HTTPException: 403 if the account is deactivated.
    """
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated",
        )
    return current_user


async def get_current_user_optional(
    credentials: Credentials,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User | None:
    """
    Dependency to optionally get the current authenticated user.

    Returns None instead of raising when no valid token is provided.
    """
    if credentials is None:
        return None

    user = await _user_from_token(credentials.credentials, db)
    if user is None or not user.is_active:
        return None
    return user


def require_roles(*roles: UserRole) -> Callable:
    """
    Build a dependency that admits only users with one of the given roles.

    Usage:
        current_user: Annotated[User, Depends(require_roles(UserRole.ADMIN))]
    """
    async def checker(
        current_user: Annotated[User, Depends(get_current_active_user)],
    ) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(role.value for role in roles)}",
            )
        return current_user

    return checker
