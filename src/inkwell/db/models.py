"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Records are stored document-style: embedded collections (skills, experiences)
and reference lists (post_ids, comment_ids) live in JSON columns on their
owner row, the way a document database would nest them. There are no
foreign keys between the three tables; references are plain string ids and
are kept consistent by the services, one write at a time.

Key concepts:
- String UUID primary keys (compared by string identity for ownership checks)
- Generic JSON type (JSONB on PostgreSQL, TEXT on SQLite)
- Python-side timestamps so SQLite and PostgreSQL behave the same
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Index, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """A registered account.

    Learn: password_hash and refresh_token_hash are bcrypt digests. The
    refresh hash is empty until the first login and is overwritten on every
    login, so only the most recently issued refresh token is accepted.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    refresh_token_hash: Mapped[str] = mapped_column(
        String(255), nullable=False, default=""
    )
    fname: Mapped[str] = mapped_column(String(100), nullable=False)
    lname: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    profile_pic: Mapped[str] = mapped_column(Text, nullable=False, default="")
    roles: Mapped[list] = mapped_column(JSON, nullable=False, default=lambda: ["user"])
    skills: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    experiences: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    post_ids: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class Post(Base):
    """A blog post. author_id is set once at creation."""

    __tablename__ = "posts"
    __table_args__ = (Index("ix_posts_author_id", "author_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[str] = mapped_column(String(36), nullable=False)
    comment_ids: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class Comment(Base):
    """A comment on a post. author_id and post_id never change."""

    __tablename__ = "comments"
    __table_args__ = (Index("ix_comments_post_id", "post_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[str] = mapped_column(String(36), nullable=False)
    post_id: Mapped[str] = mapped_column(String(36), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
