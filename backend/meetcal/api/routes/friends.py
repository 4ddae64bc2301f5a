"""Friend endpoints - friend list, requests and their transitions."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from meetcal.api.deps import CurrentUserDep
from meetcal.db.database import get_db
from meetcal.schemas.friendship import FriendRequestCreate, FriendRequestLists, FriendshipOut
from meetcal.schemas.profile import ProfileOut
from meetcal.services.friendship_service import friendship_service

router = APIRouter()


@router.get("/", response_model=list[ProfileOut])
async def list_friends(user_id: CurrentUserDep, db: AsyncSession = Depends(get_db)):
    friends = await friendship_service.list_friends(db, user_id)
    return [ProfileOut.model_validate(p) for p in friends]


@router.get("/requests", response_model=FriendRequestLists)
async def list_requests(user_id: CurrentUserDep, db: AsyncSession = Depends(get_db)):
    return await friendship_service.list_requests(db, user_id)


@router.post("/requests", response_model=FriendshipOut, status_code=201)
async def send_request(
    data: FriendRequestCreate, user_id: CurrentUserDep, db: AsyncSession = Depends(get_db)
):
    """Send a friend request to the user registered under the given email."""
    edge = await friendship_service.send_request_by_email(db, user_id, data.email)
    return FriendshipOut.model_validate(edge)


@router.post("/requests/{request_id}/accept", response_model=FriendshipOut)
async def accept_request(
    request_id: int, user_id: CurrentUserDep, db: AsyncSession = Depends(get_db)
):
    edge = await friendship_service.accept_request(db, user_id, request_id)
    return FriendshipOut.model_validate(edge)


@router.post("/requests/{request_id}/reject", status_code=204)
async def reject_request(
    request_id: int, user_id: CurrentUserDep, db: AsyncSession = Depends(get_db)
):
    await friendship_service.reject_request(db, user_id, request_id)


@router.delete("/requests/{request_id}", status_code=204)
async def cancel_request(
    request_id: int, user_id: CurrentUserDep, db: AsyncSession = Depends(get_db)
):
    await friendship_service.cancel_request(db, user_id, request_id)


@router.delete("/{friend_id}", status_code=204)
async def unfriend(friend_id: str, user_id: CurrentUserDep, db: AsyncSession = Depends(get_db)):
    await friendship_service.unfriend(db, user_id, friend_id)
