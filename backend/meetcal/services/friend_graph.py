"""Friend graph - resolves accepted friendships regardless of edge direction."""

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from meetcal.models.friendship import Friendship, ACCEPTED, normalize_pair
from meetcal.models.profile import Profile
from meetcal.schemas.profile import FriendSummary


class FriendGraph:
    @staticmethod
    async def resolve_friend_ids(db: AsyncSession, user_id: str) -> set[str]:
        """Ids of everyone with an accepted edge to user_id, in either direction."""
        outgoing = await db.execute(
            select(Friendship.friend_id).where(
                Friendship.user_id == user_id, Friendship.status == ACCEPTED
            )
        )
        incoming = await db.execute(
            select(Friendship.user_id).where(
                Friendship.friend_id == user_id, Friendship.status == ACCEPTED
            )
        )
        return set(outgoing.scalars()) | set(incoming.scalars())

    @staticmethod
    async def edge_between(db: AsyncSession, a: str, b: str) -> Friendship | None:
        """The single edge (pending or accepted) joining a and b, if any."""
        low, high = normalize_pair(a, b)
        result = await db.execute(
            select(Friendship).where(
                Friendship.pair_low == low, Friendship.pair_high == high
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def are_friends(db: AsyncSession, a: str, b: str) -> bool:
        edge = await FriendGraph.edge_between(db, a, b)
        return edge is not None and edge.status == ACCEPTED

    @staticmethod
    async def load_friend_summaries(
        db: AsyncSession, ids: Iterable[str]
    ) -> dict[str, FriendSummary]:
        """Profile summaries keyed by id. Unknown ids are simply absent."""
        ids = set(ids)
        if not ids:
            return {}
        result = await db.execute(select(Profile).where(Profile.id.in_(ids)))
        return {p.id: FriendSummary.model_validate(p) for p in result.scalars()}


friend_graph = FriendGraph()
