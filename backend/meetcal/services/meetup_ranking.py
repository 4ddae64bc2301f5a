"""Meetup ranking - upcoming days where the user and friends are all available."""

from collections import defaultdict
from datetime import date, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from meetcal.config import settings
from meetcal.core.errors import InvalidInputError
from meetcal.core.logging import get_logger
from meetcal.models.availability import AVAILABLE
from meetcal.schemas.availability import MeetupCandidate
from meetcal.services.availability_store import availability_store
from meetcal.services.friend_graph import friend_graph

logger = get_logger(__name__)


class MeetupRankingService:
    @staticmethod
    async def rank_meetups(
        db: AsyncSession,
        user_id: str,
        today: date,
        window_days: int | None = None,
    ) -> list[MeetupCandidate]:
        """Candidates in [today, today + window_days], most overlapping friends first.

        Ties are broken by the earlier date. Days where no friend overlaps are
        left out entirely.
        """
        if window_days is None:
            window_days = settings.SUGGESTION_WINDOW_DAYS
        if window_days < 0:
            raise InvalidInputError("Suggestion window must not be negative")
        try:
            last_day = today + timedelta(days=window_days)
        except OverflowError:
            raise InvalidInputError("Suggestion window runs past the last representable date")

        own = await availability_store.get_range(
            db, {user_id}, today, last_day, status=AVAILABLE
        )
        candidate_dates = {r.date for r in own}
        if not candidate_dates:
            return []

        friend_ids = await friend_graph.resolve_friend_ids(db, user_id)
        friend_ids.discard(user_id)
        if not friend_ids:
            return []

        # One range query over the candidate span, narrowed to candidate dates here
        friend_records = await availability_store.get_range(
            db, friend_ids, min(candidate_dates), max(candidate_dates), status=AVAILABLE
        )
        by_date: dict[date, set[str]] = defaultdict(set)
        for record in friend_records:
            if record.date in candidate_dates:
                by_date[record.date].add(record.user_id)
        if not by_date:
            return []

        summaries = await friend_graph.load_friend_summaries(
            db, set().union(*by_date.values())
        )
        candidates = []
        for day, ids in by_date.items():
            friends = sorted(
                (summaries[i] for i in ids if i in summaries),
                key=lambda f: (f.full_name, f.id),
            )
            if friends:
                candidates.append(
                    MeetupCandidate(date=day, overlapping_friends=friends, count=len(friends))
                )

        candidates.sort(key=lambda c: (-c.count, c.date))
        logger.debug("meetups_ranked", user_id=user_id, candidates=len(candidates))
        return candidates


meetup_ranking_service = MeetupRankingService()
