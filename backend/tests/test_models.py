"""Tests for database models and the constraints they declare."""

from __future__ import annotations

import pytest
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from draftbox.core.config import settings
from draftbox.db.models import Design, DesignTag, Folder, Tag
from draftbox.db.session import get_database_url


async def test_defaults(db_session: AsyncSession) -> None:
    """Test model default values."""
    design = Design(name="Bare")
    tag = Tag(name="plain")
    db_session.add_all([design, tag])
    await db_session.commit()

    assert len(design.id) == 36
    assert design.document == "{}"
    assert design.folder_id is None
    assert design.created_at is not None
    assert tag.color == "#6B7280"


async def test_deleting_folder_row_unfiles_designs(db_session: AsyncSession) -> None:
    """ON DELETE SET NULL keeps designs when their folder row goes away."""
    folder = Folder(name="F")
    db_session.add(folder)
    await db_session.flush()
    design = Design(name="D", folder_id=folder.id)
    db_session.add(design)
    await db_session.commit()

    await db_session.execute(delete(Folder).where(Folder.id == folder.id))
    await db_session.commit()

    result = await db_session.execute(
        select(Design.folder_id).where(Design.id == design.id)
    )
    assert result.scalar_one() is None


async def test_deleting_parent_row_cascades_to_children(db_session: AsyncSession) -> None:
    """ON DELETE CASCADE removes subfolder rows with their parent."""
    parent = Folder(name="Parent")
    db_session.add(parent)
    await db_session.flush()
    child = Folder(name="Child", parent_id=parent.id)
    db_session.add(child)
    await db_session.commit()

    await db_session.execute(delete(Folder).where(Folder.id == parent.id))
    await db_session.commit()

    result = await db_session.execute(select(Folder.id))
    assert result.scalars().all() == []


async def test_deleting_design_row_cascades_to_links(db_session: AsyncSession) -> None:
    """Association rows go with their design."""
    design = Design(name="D")
    tag = Tag(name="t")
    db_session.add_all([design, tag])
    await db_session.flush()
    db_session.add(DesignTag(design_id=design.id, tag_id=tag.id))
    await db_session.commit()

    await db_session.execute(delete(Design).where(Design.id == design.id))
    await db_session.commit()

    result = await db_session.execute(select(DesignTag))
    assert result.scalars().all() == []


async def test_tag_name_unique_ignoring_case(db_session: AsyncSession) -> None:
    """The tags table itself rejects case variants of an existing name."""
    db_session.add(Tag(name="Promo"))
    await db_session.commit()

    db_session.add(Tag(name="PROMO"))
    with pytest.raises(IntegrityError):
        await db_session.commit()
    await db_session.rollback()


async def test_folder_parent_must_exist(db_session: AsyncSession) -> None:
    """Foreign keys are enforced on every connection."""
    db_session.add(Folder(name="Orphan", parent_id="does-not-exist"))
    with pytest.raises(IntegrityError):
        await db_session.commit()
    await db_session.rollback()


def test_database_url_points_at_configured_db_path() -> None:
    """The default database URL is built from Settings.db_path."""
    assert get_database_url() == f"sqlite+aiosqlite:///{settings.db_path}"
