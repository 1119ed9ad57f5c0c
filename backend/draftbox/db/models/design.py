"""Design model for user documents."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from draftbox.db.base import Base
from draftbox.utils.ids import new_id, utcnow

if TYPE_CHECKING:
    from draftbox.db.models.design_tag import DesignTag
    from draftbox.db.models.folder import Folder
    from draftbox.db.models.tag import Tag


class Design(Base):
    """A user document that may live in a folder and carry tags."""

    __tablename__ = "designs"

    # Primary key
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    # Design data
    name: Mapped[str] = mapped_column(String(512), nullable=False)
    folder_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("folders.id", ondelete="SET NULL"), nullable=True
    )
    # Serialized editor document, stored opaquely as JSON text
    document: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    # Last exported rendering (HTML), independent of the document
    rendered_cache: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    # Relationships
    folder: Mapped[Folder | None] = relationship("Folder", back_populates="designs")
    design_tags: Mapped[list[DesignTag]] = relationship(
        "DesignTag",
        back_populates="design",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    tags: Mapped[list[Tag]] = relationship(
        "Tag",
        secondary="design_tags",
        order_by="Tag.name",
        viewonly=True,
    )

    # Indexes
    __table_args__ = (
        Index("ix_designs_folder_id", "folder_id"),
        Index("ix_designs_updated_at", "updated_at"),
    )

    def __repr__(self) -> str:
        return f"<Design(id={self.id}, name={self.name}, folder_id={self.folder_id})>"
