"""Calendar view - merges a user's own statuses with friends' availability per day."""

from datetime import date, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from meetcal.core.errors import InvalidInputError
from meetcal.models.availability import AVAILABLE
from meetcal.schemas.availability import DayView
from meetcal.services.availability_store import availability_store
from meetcal.services.friend_graph import friend_graph


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """Half-open [first day of month, first day of next month)."""
    if not 1 <= month <= 12:
        raise InvalidInputError(f"Month must be between 1 and 12, got {month}")
    try:
        start = date(year, month, 1)
        end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    except ValueError:
        raise InvalidInputError(f"Year {year} is out of range")
    return start, end


class CalendarViewService:
    @staticmethod
    async def build_day_views(
        db: AsyncSession, user_id: str, start: date, end: date
    ) -> dict[date, DayView]:
        """Day views for [start, end), keyed by date.

        Only days carrying a signal appear: the user set a status, or at least
        one friend is available. Everything else is implicitly unspecified.
        """
        if end < start:
            raise InvalidInputError("Window end must not precede its start")
        if end == start:
            return {}
        last_day = end - timedelta(days=1)

        friend_ids = await friend_graph.resolve_friend_ids(db, user_id)
        friend_ids.discard(user_id)

        views: dict[date, DayView] = {}
        for record in await availability_store.get_range(db, {user_id}, start, last_day):
            views[record.date] = DayView(date=record.date, own_status=record.status)

        friend_records = await availability_store.get_range(
            db, friend_ids, start, last_day, status=AVAILABLE
        )
        summaries = await friend_graph.load_friend_summaries(
            db, {r.user_id for r in friend_records}
        )
        for record in friend_records:
            summary = summaries.get(record.user_id)
            if summary is None:
                continue  # profile removed between reads
            view = views.get(record.date)
            if view is None:
                view = views[record.date] = DayView(date=record.date)
            view.available_friends.append(summary)

        for view in views.values():
            view.available_friends.sort(key=lambda f: f.id)
        return views

    @staticmethod
    async def build_month_view(
        db: AsyncSession, user_id: str, year: int, month: int
    ) -> dict[date, DayView]:
        start, end = month_bounds(year, month)
        return await CalendarViewService.build_day_views(db, user_id, start, end)


calendar_view_service = CalendarViewService()
