"""Search service for finding designs across all folders."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from draftbox.core.logging import get_logger
from draftbox.db.models import Design, DesignTag, Folder, Tag
from draftbox.db.models.tag import NAME_COLLATION, fold_tag_name
from draftbox.services.design import designs_query

logger = get_logger(__name__)


class SearchService:
    """Search designs by name and tags.

    ``q`` is a case-insensitive substring match on the design name. Tag names
    are combined with AND: a design must carry every requested tag. Both
    filters together are also ANDed.
    """

    def __init__(self, db: AsyncSession):
        """Initialize the search service.

        Args:
            db: The database session.
        """
        self.db = db

    async def search(
        self,
        q: str | None = None,
        tag_names: list[str] | None = None,
    ) -> list[tuple[Design, str | None]]:
        """Search designs.

        Args:
            q: Optional substring of the design name.
            tag_names: Optional tag names that must all be present.

        Returns:
            (design, folder_name) pairs, most recently updated first.
            folder_name is None for unfiled designs.
        """
        query = designs_query().add_columns(Folder.name).outerjoin(
            Folder, Design.folder_id == Folder.id
        )

        if q:
            query = query.where(Design.name.ilike(f"%{self._escape_like(q)}%", escape="\\"))

        # One entry per name as the tags table tells names apart
        wanted = list(
            {fold_tag_name(name): name.strip() for name in tag_names or [] if name.strip()}.values()
        )
        if wanted:
            query = query.where(
                Design.id.in_(
                    select(DesignTag.design_id)
                    .join(Tag, DesignTag.tag_id == Tag.id)
                    .where(Tag.name.collate(NAME_COLLATION).in_(wanted))
                    .group_by(DesignTag.design_id)
                    .having(func.count(func.distinct(DesignTag.tag_id)) == len(wanted))
                )
            )

        query = query.order_by(Design.updated_at.desc(), Design.created_at.desc())

        result = await self.db.execute(query)
        rows = [(design, folder_name) for design, folder_name in result.all()]

        logger.debug("designs_searched", q=q, tags=wanted, results=len(rows))
        return rows

    @staticmethod
    def _escape_like(value: str) -> str:
        """Escape LIKE wildcards so the query is matched literally."""
        return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
