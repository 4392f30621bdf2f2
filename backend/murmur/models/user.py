"""
Murmur Backend — User SQLAlchemy Model
========================================

What:  ORM model for the `users` table.
Who:   IdentityService (create, lookup by username), FollowService (existence
       check), FeedService (author username join), Alembic.

Table Design:
    - Integer autoincrement primary key, assigned by the store
    - username is globally unique; the UNIQUE constraint is the only guard
      against concurrent duplicate registrations
    - password_hash holds a bcrypt hash and is never serialized
    - Rows are immutable after registration; deletion is not supported
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from murmur.database import Base


class User(Base):
    """A registered account."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Login name, unique across all users",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash of the password",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
