"""Declarative base and the translation index table.

Uses SQLAlchemy 2.0 ``DeclarativeBase``. The unique constraint on
``(translatable_type, translatable_id, locale, key)`` is what makes index
writes upserts rather than inserts.
"""

from __future__ import annotations

import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class TranslatableBase(DeclarativeBase):
    """Shared declarative base for the engine's tables."""


class TimestampMixin:
    """Mixin that adds ``created_at`` and ``updated_at`` with server defaults."""

    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        server_default=func.now(),
        onupdate=func.now(),
    )


class TranslationTable(TimestampMixin, TranslatableBase):
    __tablename__ = "translations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # UUID hex for provisional ids, the host key otherwise
    translatable_id: Mapped[str] = mapped_column(String(64), nullable=False)
    translatable_type: Mapped[str] = mapped_column(String(255), nullable=False)
    locale: Mapped[str] = mapped_column(String(5), nullable=False)
    key: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_translations_translatable", "translatable_id", "translatable_type"),
        UniqueConstraint(
            "translatable_type", "translatable_id", "locale", "key",
            name="uq_translations_type_id_locale_key",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<TranslationTable({self.translatable_type}:{self.translatable_id} "
            f"{self.locale}.{self.key})>"
        )


def create_schema(engine: Engine) -> None:
    """Create the translation tables if they do not exist."""
    TranslatableBase.metadata.create_all(engine)
