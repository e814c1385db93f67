from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String, Text, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from i18n_store.app.core.database import Base

CACHE_NAMESPACE = "i18n"


def cache_key_for(locale: str, key: str) -> str:
    """Cache key under which a lookup of *key* in *locale* is stored."""
    return f"{CACHE_NAMESPACE}.{locale}.{key}"


class Translation(Base):
    __tablename__ = "translations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    locale: Mapped[str] = mapped_column(String(16), nullable=False)
    key: Mapped[str] = mapped_column(Text, nullable=False)
    # NULL marks an untranslated stub
    value: Mapped[Any | None] = mapped_column(JSON(none_as_null=True), nullable=True)
    interpolations: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint("locale", "key", name="uq_translations_locale_key"),
        Index("ix_translations_locale", "locale"),
    )

    @property
    def cache_key(self) -> str:
        return cache_key_for(self.locale, self.key)

    def __repr__(self) -> str:
        return f"<Translation {self.locale}.{self.key}={self.value!r}>"
