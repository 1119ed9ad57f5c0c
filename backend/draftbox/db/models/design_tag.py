"""Association rows linking designs to tags."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from draftbox.db.base import Base
from draftbox.utils.ids import utcnow

if TYPE_CHECKING:
    from draftbox.db.models.design import Design
    from draftbox.db.models.tag import Tag


class DesignTag(Base):
    """One tag on one design. The (design_id, tag_id) pair is the key, so a
    tag can sit on a design at most once; rows go away with either side."""

    __tablename__ = "design_tags"

    design_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("designs.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    design: Mapped[Design] = relationship("Design", back_populates="design_tags")
    tag: Mapped[Tag] = relationship("Tag", back_populates="design_tags")

    # Reverse lookups ("designs with tag X") use tag_id first
    __table_args__ = (
        Index("ix_design_tags_tag_id", "tag_id"),
        Index("ix_design_tags_design_id", "design_id"),
    )

    def __repr__(self) -> str:
        return f"<DesignTag(design_id={self.design_id}, tag_id={self.tag_id})>"
