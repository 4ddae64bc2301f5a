"""Database models package."""

from meetcal.models.profile import Profile
from meetcal.models.credential import Credential, AuthSession
from meetcal.models.friendship import Friendship
from meetcal.models.availability import Availability

__all__ = ["Profile", "Credential", "AuthSession", "Friendship", "Availability"]
