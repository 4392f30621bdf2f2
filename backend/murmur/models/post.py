"""
Murmur Backend — Post SQLAlchemy Model
========================================

What:  ORM model for the `posts` table: short text owned by one user.
Who:   PostService (insert), FeedService (followee query), Alembic.

Lifecycle:
    Created by PostService only. There is no update or delete; created_at is
    set once at insert.

Query Patterns:
    - Feed: WHERE user_id IN (...) ORDER BY created_at DESC, id DESC
      → served by idx_posts_user_created
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from murmur.database import Base

# Maximum post length in characters (inclusive)
MAX_CONTENT_LENGTH = 200


class Post(Base):
    """A short text post. Content is 1-200 characters."""

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    content: Mapped[str] = mapped_column(
        String(MAX_CONTENT_LENGTH),
        nullable=False,
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        comment="Owning user",
    )

    # UTC, set by the application at insert; the server default covers raw SQL inserts
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_posts_user_created", user_id, created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, user_id={self.user_id}, created_at='{self.created_at}')>"
