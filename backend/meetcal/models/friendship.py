"""Friendship model - directed request edge between two profiles."""

from datetime import datetime

from sqlalchemy import String, DateTime, ForeignKey, CheckConstraint, Index, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from meetcal.db.database import Base

PENDING = "pending"
ACCEPTED = "accepted"


def normalize_pair(a: str, b: str) -> tuple[str, str]:
    """Order-independent key for the unordered pair {a, b}."""
    return (a, b) if a <= b else (b, a)


class Friendship(Base):
    """Edge user_id -> friend_id.

    pair_low/pair_high hold the sorted ids so the store itself guarantees at
    most one edge per unordered pair, whatever its direction.
    """
    __tablename__ = "friendships"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("profiles.id", ondelete="CASCADE"))  # requester
    friend_id: Mapped[str] = mapped_column(ForeignKey("profiles.id", ondelete="CASCADE"))  # target
    status: Mapped[str] = mapped_column(String(16), default=PENDING)  # "pending" or "accepted"

    pair_low: Mapped[str] = mapped_column(String(36))
    pair_high: Mapped[str] = mapped_column(String(36))

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (
        CheckConstraint("user_id <> friend_id", name="chk_friendships_not_self"),
        UniqueConstraint("pair_low", "pair_high", name="uq_friendships_pair"),
        Index("idx_friendships_user_status", "user_id", "status"),
        Index("idx_friendships_friend_status", "friend_id", "status"),
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if self.user_id and self.friend_id:
            self.pair_low, self.pair_high = normalize_pair(self.user_id, self.friend_id)

    def other(self, user_id: str) -> str:
        """The counterpart of user_id on this edge."""
        return self.friend_id if self.user_id == user_id else self.user_id
