"""Friendship-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, EmailStr

from meetcal.schemas.profile import ProfileOut


class FriendRequestCreate(BaseModel):
    email: EmailStr


class FriendRequestOut(BaseModel):
    """A pending request, with the profile on the other side of it."""
    id: int
    user_id: str
    friend_id: str
    status: str
    created_at: datetime | None = None
    counterpart: ProfileOut


class FriendRequestLists(BaseModel):
    incoming: list[FriendRequestOut]
    outgoing: list[FriendRequestOut]


class FriendshipOut(BaseModel):
    id: int
    user_id: str
    friend_id: str
    status: str

    model_config = {"from_attributes": True}
