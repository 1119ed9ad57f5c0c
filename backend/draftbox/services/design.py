"""Design service: CRUD, filing and dashboard listing for designs."""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from draftbox.core.config import settings
from draftbox.core.exceptions import InvalidArgumentError, InvalidReferenceError, NotFoundError
from draftbox.core.logging import get_logger
from draftbox.db.models import Design, DesignTag, Folder, Tag
from draftbox.db.models.tag import NAME_COLLATION
from draftbox.utils.ids import utcnow

logger = get_logger(__name__)

UNSET: Any = object()


def encode_document(document: Any) -> str:
    """Serialize a client document for storage.

    Raises:
        InvalidArgumentError: If the document is not JSON serializable.
    """
    try:
        return json.dumps(document, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"Document is not JSON serializable: {e}") from e


def decode_document(raw: str | None) -> Any:
    """Decode a stored document back into its JSON structure."""
    if not raw:
        return {}
    return json.loads(raw)


def split_tag_names(raw: str | None) -> list[str]:
    """Split a comma-separated tag filter into trimmed, non-empty names."""
    if not raw:
        return []
    return [name.strip() for name in raw.split(",") if name.strip()]


def designs_query():
    """Base select for designs with their tags eagerly loaded."""
    return (
        select(Design)
        .options(selectinload(Design.tags))
        .execution_options(populate_existing=True)
    )


class DesignService:
    """Service for designs and the folder-scoped dashboard listing."""

    def __init__(self, db: AsyncSession):
        """Initialize the design service.

        Args:
            db: The database session.
        """
        self.db = db

    async def get_design(self, design_id: str) -> Design:
        """Get a design with its tags.

        Raises:
            NotFoundError: If the design does not exist.
        """
        result = await self.db.execute(designs_query().where(Design.id == design_id))
        design = result.scalar_one_or_none()
        if design is None:
            raise NotFoundError("Design", design_id)
        return design

    async def list_designs(
        self,
        folder_id: str | None = None,
        unfiled_only: bool = False,
        tag_names: list[str] | None = None,
    ) -> list[Design]:
        """List designs for the dashboard, most recently updated first.

        The tag filter here matches designs carrying ANY of the given names;
        SearchService requires ALL of them.

        Args:
            folder_id: Only designs filed directly in this folder.
            unfiled_only: Only designs with no folder.
            tag_names: Tag names (case-insensitive) to match with OR semantics.
        """
        query = designs_query()

        if folder_id:
            query = query.where(Design.folder_id == folder_id)

        if unfiled_only:
            query = query.where(Design.folder_id.is_(None))

        if tag_names:
            names = [name.strip() for name in tag_names]
            query = query.where(
                Design.id.in_(
                    select(DesignTag.design_id)
                    .join(Tag, DesignTag.tag_id == Tag.id)
                    .where(Tag.name.collate(NAME_COLLATION).in_(names))
                )
            )

        query = query.order_by(Design.updated_at.desc(), Design.created_at.desc())

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def create_design(
        self,
        name: str | None = None,
        folder_id: str | None = None,
        document: Any = None,
    ) -> Design:
        """Create a design.

        Args:
            name: Display name; blank names become the configured default.
            folder_id: Optional folder to file the design in.
            document: Optional JSON document (defaults to an empty object).

        Raises:
            InvalidReferenceError: If folder_id does not exist.
        """
        if folder_id is not None:
            await self._require_folder(folder_id)

        now = utcnow()
        design = Design(
            name=self._clean_name(name),
            folder_id=folder_id,
            document=encode_document(document if document is not None else {}),
            created_at=now,
            updated_at=now,
        )
        self.db.add(design)
        await self.db.flush()

        logger.info("design_created", design_id=design.id, name=design.name, folder_id=folder_id)
        return await self.get_design(design.id)

    async def update_design(
        self,
        design_id: str,
        name: str | None = UNSET,
        document: Any = UNSET,
        rendered_cache: str | None = UNSET,
    ) -> Design:
        """Apply a partial update to a design.

        Omitted fields are left untouched; ``updated_at`` is always refreshed.
        This is the operation the autosave coordinator persists through.

        Raises:
            NotFoundError: If the design does not exist.
        """
        design = await self.get_design(design_id)
        changed: list[str] = []

        if name is not UNSET:
            design.name = self._clean_name(name)
            changed.append("name")
        if document is not UNSET:
            design.document = encode_document(document if document is not None else {})
            changed.append("document")
        if rendered_cache is not UNSET:
            design.rendered_cache = rendered_cache
            changed.append("rendered_cache")

        design.updated_at = utcnow()
        await self.db.flush()

        logger.info("design_updated", design_id=design_id, fields=changed)
        return await self.get_design(design_id)

    async def move_design(self, design_id: str, folder_id: str | None) -> Design:
        """File a design in a folder, or unfile it with ``folder_id=None``.

        Raises:
            NotFoundError: If the design does not exist.
            InvalidReferenceError: If folder_id does not exist.
        """
        design = await self.get_design(design_id)

        if folder_id is not None:
            await self._require_folder(folder_id)

        design.folder_id = folder_id
        design.updated_at = utcnow()
        await self.db.flush()

        logger.info("design_moved", design_id=design_id, folder_id=folder_id)
        return await self.get_design(design_id)

    async def delete_design(self, design_id: str) -> None:
        """Delete a design and its tag associations.

        Raises:
            NotFoundError: If the design does not exist.
        """
        design = await self.get_design(design_id)

        await self.db.execute(delete(DesignTag).where(DesignTag.design_id == design_id))
        await self.db.delete(design)
        await self.db.flush()

        logger.info("design_deleted", design_id=design_id)

    async def _require_folder(self, folder_id: str) -> None:
        result = await self.db.execute(select(Folder.id).where(Folder.id == folder_id))
        if result.scalar_one_or_none() is None:
            raise InvalidReferenceError(f"Folder not found: {folder_id}")

    def _clean_name(self, name: str | None) -> str:
        return (name or "").strip() or settings.default_design_name
