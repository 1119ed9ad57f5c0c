"""Tag model for design labels."""

from __future__ import annotations

import string
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from draftbox.core.config import settings
from draftbox.db.base import Base
from draftbox.utils.ids import new_id, utcnow

if TYPE_CHECKING:
    from draftbox.db.models.design_tag import DesignTag

# SQLite NOCASE folds ASCII letters only; "Émail" and "émail" are distinct names
NAME_COLLATION = "NOCASE"

_ASCII_FOLD = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def fold_tag_name(name: str) -> str:
    """Return the key under which NAME_COLLATION considers two names equal."""
    return name.strip().translate(_ASCII_FOLD)


class Tag(Base):
    """A label with a display color; names are unique ignoring case."""

    __tablename__ = "tags"

    # Primary key
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    # Tag data
    name: Mapped[str] = mapped_column(
        String(100, collation=NAME_COLLATION), unique=True, nullable=False
    )
    color: Mapped[str] = mapped_column(
        String(20), nullable=False, default=lambda: settings.default_tag_color
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    # Relationships
    design_tags: Mapped[list[DesignTag]] = relationship(
        "DesignTag",
        back_populates="tag",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name={self.name}, color={self.color})>"
