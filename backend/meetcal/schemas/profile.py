"""Profile-related Pydantic schemas."""

from pydantic import BaseModel, Field


class ProfileOut(BaseModel):
    id: str
    full_name: str
    email: str
    avatar_url: str | None

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    full_name: str | None = Field(default=None, min_length=1, max_length=150)
    avatar_url: str | None = None


class FriendSummary(BaseModel):
    """The slice of a profile shown next to a calendar day."""
    id: str
    full_name: str
    avatar_url: str | None = None

    model_config = {"from_attributes": True}
