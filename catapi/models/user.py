"""
Cat API — User SQLAlchemy Model
=================================

What:  ORM model representing the `users` table.

Column notes:
    - email: intended to be unique, but uniqueness is not enforced by the
      schema; login picks the first matching row
    - role: "user" or "admin"; stored and carried in tokens, not used for
      authorization (the admin routes compare the email instead)
    - password: argon2 hash string (salt and parameters embedded); plaintext
      is never written to this column
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from catapi.database import Base


class User(Base):
    """An account that can own cats and authenticate with a bearer token."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    user_name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="user",
        server_default=text("'user'"),
    )

    password: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_users_email", "email"),
    )

    def __repr__(self) -> str:
        # Never include the password hash
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
