"""
skillconnect/core/dependencies.py

Authentication and Authorization Dependencies

Provides the per-request session context for FastAPI routes:
- Verifies the bearer access token issued by the auth provider
- Loads the caller's profile and derives the role from it on every request
- Restricts access based on the marketplace role

Pagination Dependency:
- Provides reusable dependency for pagination (skip, limit).
"""

import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import Any, Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from skillconnect.core.config import settings
from skillconnect.core.schemas import TokenPayload
from skillconnect.database.enums import UserRole
from skillconnect.database.models import Profile
from skillconnect.database.session import get_db

# ---------------------------------------------------
# Logger Configuration
# ---------------------------------------------------
logger = logging.getLogger(__name__)

# ---------------------------------------------------
# Bearer Scheme
# ---------------------------------------------------
# auto_error disabled so a missing header produces our own 401 payload
bearer_scheme = HTTPBearer(auto_error=False)


# ---------------------------------------------------
# Pagination Dependency
# ---------------------------------------------------
class PaginationParams:
    """
    Dependency that provides pagination parameters from query parameters.
    """

    def __init__(
        self,
        skip: int = Query(0, ge=0, description="Number of records to skip for pagination"),
        limit: int = Query(50, ge=1, le=200, description="Maximum number of records to return"),
    ):
        self.skip = skip
        self.limit = limit


# ---------------------------------------------------
# Session Context
# ---------------------------------------------------
@dataclass(frozen=True)
class SessionContext:
    """
    Who is calling and in what role, built fresh for each request.

    `profile` is None until the first onboarding call creates it; `role` is
    None until the caller picks one.
    """

    user_id: UUID
    email: str | None
    role: UserRole | None
    profile: Profile | None

    @property
    def is_provider(self) -> bool:
        return self.role == UserRole.PROVIDER

    @property
    def is_client(self) -> bool:
        return self.role == UserRole.CLIENT


def decode_access_token(token: str) -> TokenPayload:
    """Verify signature, expiry and audience; raise JWTError/ValidationError on failure."""
    payload = jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        audience=settings.JWT_AUDIENCE,
    )
    return TokenPayload(**payload)


# ---------------------------------------------------
# Authentication Functions
# ---------------------------------------------------
async def get_session_context(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: AsyncSession = Depends(get_db),
) -> SessionContext:
    """
    Authenticate the caller from the Authorization header and load their profile.

    Raises:
        HTTPException: 401 Unauthorized if the token is missing or invalid.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None or not credentials.credentials:
        logger.debug("[AUTH] No bearer token found in Authorization header.")
        raise credentials_exception

    try:
        token_data = decode_access_token(credentials.credentials)
    except (JWTError, ValidationError) as e:
        logger.warning(f"[AUTH] JWT decoding/validation failed: {e}")
        raise credentials_exception

    result = await db.execute(select(Profile).where(Profile.user_id == token_data.sub))
    profile = result.scalars().first()

    role = profile.user_type if profile else None
    logger.debug(f"[AUTH] Identity {token_data.sub} authenticated (role={role}).")
    return SessionContext(
        user_id=token_data.sub,
        email=token_data.email or (profile.email if profile else None),
        role=role,
        profile=profile,
    )


# ---------------------------------------------------
# Authorization Functions (Role-Based)
# ---------------------------------------------------
def require_role(*roles: UserRole) -> Callable[..., Coroutine[Any, Any, SessionContext]]:
    """
    Dependency to restrict access to callers holding any of the specified roles.
    Callers that have not picked a role yet are always rejected.
    """

    async def checker(
        session: SessionContext = Depends(get_session_context),
    ) -> SessionContext:
        if session.role is None or session.role not in roles:
            logger.warning(
                f"[RBAC] Access denied: identity {session.user_id} with role {session.role} "
                f"attempted access (allowed roles: {[r.value for r in roles]})"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied for role: {session.role.value if session.role else 'none'}",
            )
        return session

    return checker


SessionDep = Annotated[SessionContext, Depends(get_session_context)]
ClientDep = Annotated[SessionContext, Depends(require_role(UserRole.CLIENT))]
ProviderDep = Annotated[SessionContext, Depends(require_role(UserRole.PROVIDER))]
