"""Profile endpoints - read and update the signed-in user's profile."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from meetcal.api.deps import CurrentUserDep
from meetcal.core.errors import NotFoundError
from meetcal.db.database import get_db
from meetcal.models.profile import Profile
from meetcal.schemas.profile import ProfileOut, ProfileUpdate

router = APIRouter()


async def _get_profile_or_404(user_id: str, db: AsyncSession) -> Profile:
    profile = await db.get(Profile, user_id)
    if profile is None:
        raise NotFoundError("Profile not found")
    return profile


@router.get("/", response_model=ProfileOut)
async def get_profile(user_id: CurrentUserDep, db: AsyncSession = Depends(get_db)):
    return ProfileOut.model_validate(await _get_profile_or_404(user_id, db))


@router.patch("/", response_model=ProfileOut)
async def update_profile(
    data: ProfileUpdate, user_id: CurrentUserDep, db: AsyncSession = Depends(get_db)
):
    """Update only the provided fields (full_name, avatar_url)."""
    profile = await _get_profile_or_404(user_id, db)

    update_data = data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if field == "full_name" and value is None:
            continue  # name is required
        setattr(profile, field, value)

    await db.flush()
    return ProfileOut.model_validate(profile)
