"""
Murmur Backend — Follow Edge Model
====================================

What:  Directed edge follower → followee. The follower's feed includes the
       followee's posts.

Invariants (enforced by the store):
    - Composite primary key (follower_id, followee_id): at most one edge per
      ordered pair
    - CHECK follower_id <> followee_id: no self-follow
"""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, text
from sqlalchemy.orm import Mapped, mapped_column

from murmur.database import Base


class Follow(Base):
    __tablename__ = "follows"

    follower_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), primary_key=True
    )
    followee_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), primary_key=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        CheckConstraint("follower_id <> followee_id", name="ck_follows_not_self"),
        Index("idx_follows_followee", "followee_id"),
    )

    def __repr__(self) -> str:
        return f"<Follow({self.follower_id} -> {self.followee_id})>"
