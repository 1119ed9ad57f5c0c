"""Folder model for the design hierarchy."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from draftbox.db.base import Base
from draftbox.utils.ids import new_id, utcnow

if TYPE_CHECKING:
    from draftbox.db.models.design import Design


class Folder(Base):
    """A named node in the folder tree.

    A null ``parent_id`` marks a root-level folder. Deleting a parent row
    cascades to its subfolders at the database level; designs are never
    deleted with a folder (their ``folder_id`` is set to null instead).
    """

    __tablename__ = "folders"

    # Primary key
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    # Folder data
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    parent_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("folders.id", ondelete="CASCADE"), nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    # Relationships
    designs: Mapped[list[Design]] = relationship(
        "Design", back_populates="folder", passive_deletes=True
    )

    # Indexes
    __table_args__ = (
        Index("ix_folders_parent_id", "parent_id"),
    )

    def __repr__(self) -> str:
        return f"<Folder(id={self.id}, name={self.name}, parent_id={self.parent_id})>"
