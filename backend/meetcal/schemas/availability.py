"""Availability, day view and meetup suggestion schemas."""

from datetime import date
from typing import Literal

from pydantic import BaseModel

from meetcal.schemas.profile import FriendSummary

UNSPECIFIED = "unspecified"

OwnStatus = Literal["available", "busy", "unspecified"]


class SetStatusRequest(BaseModel):
    """None clears the day back to unspecified."""
    status: Literal["available", "busy"] | None = None


class StatusOut(BaseModel):
    date: date
    status: OwnStatus


class DayView(BaseModel):
    date: date
    own_status: OwnStatus = UNSPECIFIED
    available_friends: list[FriendSummary] = []


class MeetupCandidate(BaseModel):
    date: date
    overlapping_friends: list[FriendSummary]
    count: int
