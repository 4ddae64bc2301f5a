"""Availability store - per-user, per-day status reads and upsert writes."""

from collections.abc import Iterable
from datetime import date

from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from meetcal.core.errors import InvalidInputError
from meetcal.core.logging import get_logger
from meetcal.models.availability import Availability, AVAILABLE, BUSY, STATUSES

logger = get_logger(__name__)

# Toggle order for a single day: unspecified -> busy -> available -> unspecified
STATUS_CYCLE: dict[str | None, str | None] = {
    None: BUSY,
    BUSY: AVAILABLE,
    AVAILABLE: None,
}


def next_status(current: str | None) -> str | None:
    """Next status in the toggle cycle."""
    if current is not None and current not in STATUSES:
        raise InvalidInputError(f"Unknown availability status: {current!r}")
    return STATUS_CYCLE[current]


class AvailabilityStore:
    @staticmethod
    async def get_range(
        db: AsyncSession,
        user_ids: Iterable[str],
        start: date,
        end: date,
        status: str | None = None,
    ) -> list[Availability]:
        """Records for user_ids with start <= date <= end, optionally one status only."""
        user_ids = set(user_ids)
        if status is not None and status not in STATUSES:
            raise InvalidInputError(f"Unknown availability status: {status!r}")
        if not user_ids or start > end:
            return []

        stmt = select(Availability).where(
            Availability.user_id.in_(user_ids),
            Availability.date >= start,
            Availability.date <= end,
        )
        if status is not None:
            stmt = stmt.where(Availability.status == status)
        result = await db.execute(stmt.order_by(Availability.date, Availability.user_id))
        return list(result.scalars().all())

    @staticmethod
    async def get_status(db: AsyncSession, user_id: str, day: date) -> str | None:
        """Stored status for the day, or None when unspecified."""
        result = await db.execute(
            select(Availability.status).where(
                Availability.user_id == user_id, Availability.date == day
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def set_status(db: AsyncSession, user_id: str, day: date, status: str | None) -> None:
        """Upsert the day's status; None deletes the record.

        A concurrent insert for the same (user_id, date) surfaces as a unique
        violation on our insert; the savepoint is rolled back and the write is
        applied as an update instead, so the last write wins and one row remains.
        """
        if status is not None and status not in STATUSES:
            raise InvalidInputError(f"Unknown availability status: {status!r}")

        if status is None:
            await db.execute(
                delete(Availability).where(
                    Availability.user_id == user_id, Availability.date == day
                )
            )
            logger.info("availability_cleared", user_id=user_id, date=day.isoformat())
            return

        if await AvailabilityStore._update(db, user_id, day, status):
            logger.info("availability_updated", user_id=user_id, date=day.isoformat(), status=status)
            return

        try:
            async with db.begin_nested():
                db.add(Availability(user_id=user_id, date=day, status=status))
        except IntegrityError:
            logger.info("availability_insert_raced", user_id=user_id, date=day.isoformat())
            await AvailabilityStore._update(db, user_id, day, status)
        logger.info("availability_set", user_id=user_id, date=day.isoformat(), status=status)

    @staticmethod
    async def toggle_status(db: AsyncSession, user_id: str, day: date) -> str | None:
        """Advance the day one step through the toggle cycle and return the new status."""
        current = await AvailabilityStore.get_status(db, user_id, day)
        new_status = next_status(current)
        await AvailabilityStore.set_status(db, user_id, day, new_status)
        return new_status

    @staticmethod
    async def _update(db: AsyncSession, user_id: str, day: date, status: str) -> bool:
        result = await db.execute(
            update(Availability)
            .where(Availability.user_id == user_id, Availability.date == day)
            .values(status=status)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount > 0


availability_store = AvailabilityStore()
