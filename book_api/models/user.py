"""User ORM - the single entity of the service.

Invariants:
    - user_id is an integer primary key assigned by the store, never client-supplied
    - email is unique at the store level; the handler never pre-checks it
    - password_hash is write-only: never part of PUBLIC_COLUMNS
    - role, created_at and updated_at are stamped by the store (server defaults)

Design Decisions:
    - Server-side defaults over Python defaults: handler inserts only email,
      display_name and password_hash, everything else comes from the store
    - updated_at uses onupdate so a repeated update still bumps the timestamp
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from book_api.db.base import Base


class User(Base):
    """User account row."""
    __tablename__ = "users"

    user_id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True,
    )
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, server_default="user",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


# Projection returned to API callers (label -> column). No credential column.
PUBLIC_COLUMNS = (
    User.user_id.label("id"),
    User.email,
    User.display_name,
    User.role,
    User.created_at,
    User.updated_at,
)
