"""Friendship service - request/accept/reject/cancel/unfriend transitions.

Per viewer, a pair of users is in one of four states:

- "none": no edge between them
- "pending-outgoing": the viewer sent a request that is not answered yet
- "pending-incoming": the other user sent the viewer a request
- "accepted": friends, whichever direction the edge was created in
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from meetcal.core.errors import ConflictError, InvalidInputError, NotFoundError
from meetcal.core.logging import get_logger
from meetcal.models.friendship import Friendship, PENDING, ACCEPTED
from meetcal.models.profile import Profile, normalize_email
from meetcal.schemas.friendship import FriendRequestOut, FriendRequestLists
from meetcal.schemas.profile import ProfileOut
from meetcal.services.friend_graph import friend_graph

logger = get_logger(__name__)

NONE = "none"
PENDING_OUTGOING = "pending-outgoing"
PENDING_INCOMING = "pending-incoming"


class FriendshipService:
    @staticmethod
    async def relationship_state(db: AsyncSession, me: str, other: str) -> str:
        edge = await friend_graph.edge_between(db, me, other)
        if edge is None:
            return NONE
        if edge.status == ACCEPTED:
            return ACCEPTED
        return PENDING_OUTGOING if edge.user_id == me else PENDING_INCOMING

    @staticmethod
    async def send_request(db: AsyncSession, me: str, target_id: str) -> Friendship:
        """none -> pending-outgoing."""
        if me == target_id:
            raise InvalidInputError("You cannot send a friend request to yourself")

        target = await db.get(Profile, target_id)
        if target is None:
            raise NotFoundError("User not found")

        existing = await friend_graph.edge_between(db, me, target_id)
        if existing is not None:
            raise FriendshipService._conflict_for(existing, me)

        edge = Friendship(user_id=me, friend_id=target_id, status=PENDING)
        try:
            async with db.begin_nested():
                db.add(edge)
        except IntegrityError:
            # Another request for the same pair landed between our check and insert
            raise ConflictError("A friendship or request already exists between you")

        logger.info("friend_request_sent", requester_id=me, target_id=target_id, request_id=edge.id)
        return edge

    @staticmethod
    async def send_request_by_email(db: AsyncSession, me: str, email: str) -> Friendship:
        result = await db.execute(select(Profile).where(Profile.email == normalize_email(email)))
        target = result.scalar_one_or_none()
        if target is None:
            raise NotFoundError("User with this email not found")
        return await FriendshipService.send_request(db, me, target.id)

    @staticmethod
    async def accept_request(db: AsyncSession, me: str, request_id: int) -> Friendship:
        """pending-incoming -> accepted. Only the target may accept."""
        edge = await FriendshipService._pending_request(db, request_id)
        if edge.friend_id != me:
            raise NotFoundError("Friend request not found")
        edge.status = ACCEPTED
        await db.flush()
        logger.info("friend_request_accepted", request_id=request_id, user_id=me)
        return edge

    @staticmethod
    async def reject_request(db: AsyncSession, me: str, request_id: int) -> None:
        """pending-incoming -> none."""
        edge = await FriendshipService._pending_request(db, request_id)
        if edge.friend_id != me:
            raise NotFoundError("Friend request not found")
        await db.delete(edge)
        await db.flush()
        logger.info("friend_request_rejected", request_id=request_id, user_id=me)

    @staticmethod
    async def cancel_request(db: AsyncSession, me: str, request_id: int) -> None:
        """pending-outgoing -> none."""
        edge = await FriendshipService._pending_request(db, request_id)
        if edge.user_id != me:
            raise NotFoundError("Friend request not found")
        await db.delete(edge)
        await db.flush()
        logger.info("friend_request_cancelled", request_id=request_id, user_id=me)

    @staticmethod
    async def unfriend(db: AsyncSession, me: str, other: str) -> None:
        """accepted -> none, whichever direction the edge was stored in."""
        if me == other:
            raise InvalidInputError("You cannot unfriend yourself")
        edge = await friend_graph.edge_between(db, me, other)
        if edge is None or edge.status != ACCEPTED:
            raise NotFoundError("Friendship not found")
        await db.delete(edge)
        await db.flush()
        logger.info("friend_removed", user_id=me, friend_id=other)

    @staticmethod
    async def list_friends(db: AsyncSession, me: str) -> list[Profile]:
        friend_ids = await friend_graph.resolve_friend_ids(db, me)
        friend_ids.discard(me)
        if not friend_ids:
            return []
        result = await db.execute(
            select(Profile)
            .where(Profile.id.in_(friend_ids))
            .order_by(Profile.full_name, Profile.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_requests(db: AsyncSession, me: str) -> FriendRequestLists:
        """Pending requests sent to me (incoming) and by me (outgoing)."""
        incoming = await db.execute(
            select(Friendship, Profile)
            .join(Profile, Friendship.user_id == Profile.id)
            .where(Friendship.friend_id == me, Friendship.status == PENDING)
            .order_by(Friendship.id)
        )
        outgoing = await db.execute(
            select(Friendship, Profile)
            .join(Profile, Friendship.friend_id == Profile.id)
            .where(Friendship.user_id == me, Friendship.status == PENDING)
            .order_by(Friendship.id)
        )
        return FriendRequestLists(
            incoming=[_request_out(edge, profile) for edge, profile in incoming.all()],
            outgoing=[_request_out(edge, profile) for edge, profile in outgoing.all()],
        )

    @staticmethod
    async def _pending_request(db: AsyncSession, request_id: int) -> Friendship:
        edge = await db.get(Friendship, request_id)
        if edge is None or edge.status != PENDING:
            raise NotFoundError("Friend request not found")
        return edge

    @staticmethod
    def _conflict_for(edge: Friendship, me: str) -> ConflictError:
        if edge.status == ACCEPTED:
            return ConflictError("You are already friends")
        if edge.user_id == me:
            return ConflictError("You have already sent a friend request")
        return ConflictError("This user has already sent you a friend request")


def _request_out(edge: Friendship, counterpart: Profile) -> FriendRequestOut:
    return FriendRequestOut(
        id=edge.id,
        user_id=edge.user_id,
        friend_id=edge.friend_id,
        status=edge.status,
        created_at=edge.created_at,
        counterpart=ProfileOut.model_validate(counterpart),
    )


friendship_service = FriendshipService()
