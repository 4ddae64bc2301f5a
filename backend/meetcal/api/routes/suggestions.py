"""Meetup suggestion endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from meetcal.api.deps import CurrentUserDep
from meetcal.db.database import get_db
from meetcal.schemas.availability import MeetupCandidate
from meetcal.services.meetup_ranking import meetup_ranking_service

router = APIRouter()


@router.get("/", response_model=list[MeetupCandidate])
async def get_suggestions(
    user_id: CurrentUserDep,
    days: int | None = Query(default=None, ge=0, le=366),
    today: date | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Best upcoming days to meet, most overlapping friends first."""
    return await meetup_ranking_service.rank_meetups(
        db, user_id, today or date.today(), window_days=days
    )
