"""Auth endpoints - sign up, sign in, sign out, session lookup."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from meetcal.api.deps import get_bearer_token
from meetcal.db.database import get_db
from meetcal.schemas.auth import SessionInfo, SignInRequest, SignUpRequest, TokenPair
from meetcal.schemas.profile import ProfileOut
from meetcal.services.identity_service import identity_service

router = APIRouter()


@router.post("/signup", response_model=ProfileOut, status_code=201)
async def sign_up(data: SignUpRequest, db: AsyncSession = Depends(get_db)):
    """Register a new account and its profile."""
    profile = await identity_service.sign_up(db, data.email, data.password, data.full_name)
    return ProfileOut.model_validate(profile)


@router.post("/signin", response_model=TokenPair)
async def sign_in(data: SignInRequest, db: AsyncSession = Depends(get_db)):
    return await identity_service.sign_in(db, data.email, data.password)


@router.post("/signout", status_code=204)
async def sign_out(
    token: Annotated[str, Depends(get_bearer_token)], db: AsyncSession = Depends(get_db)
):
    await identity_service.sign_out(db, token)


@router.get("/session", response_model=SessionInfo)
async def current_session(
    token: Annotated[str, Depends(get_bearer_token)], db: AsyncSession = Depends(get_db)
):
    """Who the bearer token belongs to; user_id is null once it is dead."""
    return SessionInfo(user_id=await identity_service.current_session(db, token))
