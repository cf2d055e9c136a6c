"""SQLAlchemy models for Snap Cook."""

from __future__ import annotations

import os
from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# JSONB on Postgres, plain JSON elsewhere (e.g. SQLite in tests).
JSONList = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Declarative base shared by all Snap Cook tables."""


class TimestampMixin:
    """Mixin that provides automatic creation timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class Recipe(TimestampMixin, Base):
    """A recommended recipe the user chose to keep."""

    __tablename__ = "recipes"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    recipe_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(1000))
    ingredients: Mapped[list[str]] = mapped_column(
        JSONList, nullable=False, default=list
    )
    instructions: Mapped[list[str]] = mapped_column(
        JSONList, nullable=False, default=list
    )
    estimated_time: Mapped[int] = mapped_column(nullable=False, default=0)
    difficulty: Mapped[Optional[str]] = mapped_column(String(32))
    tips: Mapped[Optional[str]] = mapped_column(Text)


def get_database_url() -> str:
    """Return the configured DATABASE_URL."""

    database_url = os.environ.get("DATABASE_URL")
    if not database_url:
        raise RuntimeError("DATABASE_URL environment variable is not set")

    # Normalize common Postgres URL forms to the installed psycopg v3 driver.
    if database_url.startswith("postgres://"):
        return "postgresql+psycopg://" + database_url[len("postgres://") :]
    if database_url.startswith("postgresql://"):
        return "postgresql+psycopg://" + database_url[len("postgresql://") :]
    if database_url.startswith("postgresql+psycopg2://"):
        return (
            "postgresql+psycopg://"
            + database_url[len("postgresql+psycopg2://") :]
        )

    return database_url
