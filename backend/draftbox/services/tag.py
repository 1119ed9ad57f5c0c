"""Tag service for managing tags and design-tag associations."""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from draftbox.core.config import settings
from draftbox.core.exceptions import InvalidArgumentError, NotFoundError, UnexpectedError
from draftbox.core.logging import get_logger
from draftbox.db.models import Design, DesignTag, Tag
from draftbox.db.models.tag import NAME_COLLATION
from draftbox.utils.ids import new_id, utcnow

logger = get_logger(__name__)

UNSET: Any = object()


class TagService:
    """Service for managing tags and design-tag associations.

    Tag names are unique ignoring case. Creating a tag whose name matches an
    existing one returns the existing tag untouched.
    """

    def __init__(self, db: AsyncSession):
        """Initialize the tag service.

        Args:
            db: The database session.
        """
        self.db = db

    async def get_tag(self, tag_id: str) -> Tag:
        """Get a tag by ID.

        Raises:
            NotFoundError: If the tag does not exist.
        """
        tag = await self.db.get(Tag, tag_id, populate_existing=True)
        if tag is None:
            raise NotFoundError("Tag", tag_id)
        return tag

    async def find_by_name(self, name: str) -> Tag | None:
        """Find a tag by name, compared under the column's own collation."""
        result = await self.db.execute(
            select(Tag).where(Tag.name.collate(NAME_COLLATION) == name.strip())
        )
        return result.scalar_one_or_none()

    async def create_tag(self, name: str, color: str | None = None) -> tuple[Tag, bool]:
        """Get an existing tag or create a new one.

        Args:
            name: The tag name (surrounding whitespace is trimmed).
            color: Optional display color; ignored when the tag already exists.

        Returns:
            Tuple of (tag, created).

        Raises:
            InvalidArgumentError: If the trimmed name is empty.
        """
        cleaned = self._clean_name(name)

        existing = await self.find_by_name(cleaned)
        if existing:
            logger.debug("tag_exists", tag_id=existing.id, name=existing.name)
            return existing, False

        # A concurrent writer may create the same name between the lookup and
        # the insert; the unique index then ignores ours and we return theirs
        tag_id = new_id()
        await self.db.execute(
            sqlite_insert(Tag)
            .values(
                id=tag_id,
                name=cleaned,
                color=color or settings.default_tag_color,
                created_at=utcnow(),
            )
            .on_conflict_do_nothing()
        )

        tag = await self.find_by_name(cleaned)
        if tag is None:
            raise UnexpectedError(f"Tag vanished during create: {cleaned}")
        if tag.id != tag_id:
            logger.debug("tag_exists", tag_id=tag.id, name=tag.name)
            return tag, False

        logger.info("tag_created", tag_id=tag.id, name=tag.name, color=tag.color)
        return tag, True

    async def update_tag(
        self,
        tag_id: str,
        name: str | None = UNSET,
        color: str | None = UNSET,
    ) -> Tag:
        """Rename and/or recolor a tag.

        Raises:
            NotFoundError: If the tag does not exist.
            InvalidArgumentError: If the new name is empty or used by another tag.
        """
        tag = await self.get_tag(tag_id)
        changed: list[str] = []

        if name is not UNSET:
            cleaned = self._clean_name(name)
            clash = await self.find_by_name(cleaned)
            if clash is not None and clash.id != tag.id:
                raise InvalidArgumentError(f"Tag name already in use: {clash.name}")
            tag.name = cleaned
            changed.append("name")

        if color is not UNSET and color is not None:
            tag.color = color
            changed.append("color")

        if changed:
            await self.db.flush()
            logger.info("tag_updated", tag_id=tag_id, fields=changed)

        return tag

    async def delete_tag(self, tag_id: str) -> None:
        """Delete a tag and all its design associations.

        Raises:
            NotFoundError: If the tag does not exist.
        """
        tag = await self.get_tag(tag_id)

        result = await self.db.execute(
            delete(DesignTag).where(DesignTag.tag_id == tag_id)
        )
        await self.db.delete(tag)
        await self.db.flush()

        logger.info("tag_deleted", tag_id=tag_id, associations_removed=result.rowcount or 0)

    async def get_all_tags(self) -> list[dict[str, Any]]:
        """Get all tags with usage counts.

        Returns:
            List of tag dictionaries ordered by name.
        """
        usage_count = (
            select(func.count(DesignTag.design_id))
            .where(DesignTag.tag_id == Tag.id)
            .correlate(Tag)
            .scalar_subquery()
        )

        result = await self.db.execute(
            select(Tag, usage_count.label("usage_count")).order_by(Tag.name)
        )

        return [
            {
                "id": tag.id,
                "name": tag.name,
                "color": tag.color,
                "created_at": tag.created_at,
                "usage_count": usage or 0,
            }
            for tag, usage in result.all()
        ]

    async def add_tag_to_design(self, design_id: str, tag_id: str) -> bool:
        """Add a tag to a design.

        Adding an association that already exists is a no-op.

        Args:
            design_id: The design ID.
            tag_id: The tag ID to add.

        Returns:
            True if a new association was created, False if it already existed.

        Raises:
            NotFoundError: If the design or the tag does not exist.
        """
        await self._require_design(design_id)
        await self.get_tag(tag_id)

        if await self.db.get(DesignTag, (design_id, tag_id)) is not None:
            logger.debug("tag_already_on_design", design_id=design_id, tag_id=tag_id)
            return False

        # A concurrent writer may have inserted the pair since the check above
        await self.db.execute(
            sqlite_insert(DesignTag)
            .values(design_id=design_id, tag_id=tag_id, created_at=utcnow())
            .on_conflict_do_nothing(index_elements=["design_id", "tag_id"])
        )

        logger.debug("tag_added_to_design", design_id=design_id, tag_id=tag_id)
        return True

    async def remove_tag_from_design(self, design_id: str, tag_id: str) -> bool:
        """Remove a tag from a design.

        Removing an association that does not exist is a no-op.

        Returns:
            True if removed, False if not found.
        """
        result = await self.db.execute(
            delete(DesignTag).where(
                DesignTag.design_id == design_id,
                DesignTag.tag_id == tag_id,
            )
        )
        removed = (result.rowcount or 0) > 0

        logger.debug("tag_removed_from_design", design_id=design_id, tag_id=tag_id, removed=removed)
        return removed

    async def _require_design(self, design_id: str) -> None:
        result = await self.db.execute(select(Design.id).where(Design.id == design_id))
        if result.scalar_one_or_none() is None:
            raise NotFoundError("Design", design_id)

    def _clean_name(self, name: str | None) -> str:
        """Trim a tag name, rejecting empty results."""
        cleaned = (name or "").strip()
        if not cleaned:
            raise InvalidArgumentError("Tag name is required")
        return cleaned
