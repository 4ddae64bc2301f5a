"""Shared route dependencies - bearer token to current user id."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from meetcal.core.errors import AuthenticationError
from meetcal.db.database import get_db
from meetcal.services.identity_service import identity_service

security_scheme = HTTPBearer(auto_error=False)


async def get_bearer_token(
    auth: Annotated[HTTPAuthorizationCredentials | None, Depends(security_scheme)],
) -> str:
    if auth is None:
        raise AuthenticationError("Missing bearer token")
    return auth.credentials


async def get_current_user_id(
    token: Annotated[str, Depends(get_bearer_token)],
    db: AsyncSession = Depends(get_db),
) -> str:
    user_id = await identity_service.current_session(db, token)
    if user_id is None:
        raise AuthenticationError("Could not validate credentials")
    return user_id


CurrentUserDep = Annotated[str, Depends(get_current_user_id)]
