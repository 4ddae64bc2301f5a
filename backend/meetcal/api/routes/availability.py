"""Availability endpoints - calendar views and per-day status writes."""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from meetcal.api.deps import CurrentUserDep
from meetcal.db.database import get_db
from meetcal.schemas.availability import DayView, SetStatusRequest, StatusOut, UNSPECIFIED
from meetcal.services.availability_store import availability_store
from meetcal.services.calendar_view import calendar_view_service

router = APIRouter()


@router.get("/", response_model=list[DayView])
async def get_month(
    year: int, month: int, user_id: CurrentUserDep, db: AsyncSession = Depends(get_db)
):
    """Days of the month with an own status or at least one available friend."""
    views = await calendar_view_service.build_month_view(db, user_id, year, month)
    return [views[d] for d in sorted(views)]


@router.get("/range", response_model=list[DayView])
async def get_range(
    start: date, end: date, user_id: CurrentUserDep, db: AsyncSession = Depends(get_db)
):
    """Same as the month view over an arbitrary [start, end) window."""
    views = await calendar_view_service.build_day_views(db, user_id, start, end)
    return [views[d] for d in sorted(views)]


@router.put("/{day}", response_model=StatusOut)
async def set_status(
    day: date, data: SetStatusRequest, user_id: CurrentUserDep, db: AsyncSession = Depends(get_db)
):
    await availability_store.set_status(db, user_id, day, data.status)
    return StatusOut(date=day, status=data.status or UNSPECIFIED)


@router.post("/{day}/toggle", response_model=StatusOut)
async def toggle_status(day: date, user_id: CurrentUserDep, db: AsyncSession = Depends(get_db)):
    """Cycle the day: unspecified -> busy -> available -> unspecified."""
    new_status = await availability_store.toggle_status(db, user_id, day)
    return StatusOut(date=day, status=new_status or UNSPECIFIED)
