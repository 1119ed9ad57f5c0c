"""Folder service: hierarchy operations and cascading unfile on delete."""

from __future__ import annotations

import asyncio
import weakref
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from draftbox.core.config import settings
from draftbox.core.exceptions import (
    CycleDetectedError,
    InvalidArgumentError,
    InvalidReferenceError,
    NotFoundError,
)
from draftbox.core.logging import get_logger
from draftbox.db.models import Design, Folder
from draftbox.utils.ids import utcnow

logger = get_logger(__name__)

# Marker for "argument not supplied" where None is a meaningful value
UNSET: Any = object()


class FolderService:
    """Service for creating, moving, listing and deleting folders.

    Moves and deletes take a hierarchy lock (one per event loop) so that a
    recursive delete never interleaves with a move inside the same tree.
    The lock covers the service call only; it is released before the
    caller commits. From the first write until that commit, exclusion comes
    from SQLite's database write lock, which the delete claims before it
    walks the subtree.
    """

    _hierarchy_locks: weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Lock] = (
        weakref.WeakKeyDictionary()
    )

    def __init__(self, db: AsyncSession):
        """Initialize the folder service.

        Args:
            db: The database session.
        """
        self.db = db

    @classmethod
    def hierarchy_lock(cls) -> asyncio.Lock:
        """Get the running loop's lock serializing structural changes to the folder tree.

        asyncio locks bind to the loop they first wait on, so each loop gets its own.
        """
        loop = asyncio.get_running_loop()
        lock = cls._hierarchy_locks.get(loop)
        if lock is None:
            lock = cls._hierarchy_locks[loop] = asyncio.Lock()
        return lock

    async def get_folder(self, folder_id: str) -> Folder:
        """Get a folder by ID.

        Raises:
            NotFoundError: If the folder does not exist.
        """
        folder = await self.db.get(Folder, folder_id, populate_existing=True)
        if folder is None:
            raise NotFoundError("Folder", folder_id)
        return folder

    async def create_folder(self, name: str | None = None, parent_id: str | None = None) -> Folder:
        """Create a folder, optionally under a parent.

        Args:
            name: Display name; blank names fall back to the configured default.
            parent_id: Optional parent folder ID (None creates a root folder).

        Returns:
            The new Folder.

        Raises:
            InvalidReferenceError: If parent_id does not exist.
        """
        if parent_id is not None:
            await self._require_parent(parent_id)

        now = utcnow()
        folder = Folder(
            name=(name or "").strip() or settings.default_folder_name,
            parent_id=parent_id,
            created_at=now,
            updated_at=now,
        )
        self.db.add(folder)
        await self.db.flush()

        logger.info("folder_created", folder_id=folder.id, name=folder.name, parent_id=parent_id)
        return await self.get_folder(folder.id)

    async def update_folder(
        self,
        folder_id: str,
        name: str | None = UNSET,
        parent_id: str | None = UNSET,
    ) -> Folder:
        """Rename and/or move a folder.

        Only the supplied fields change; ``updated_at`` is always refreshed.
        Passing ``parent_id=None`` moves the folder to the root.

        Raises:
            NotFoundError: If the folder does not exist.
            InvalidArgumentError: If the new name is blank.
            InvalidReferenceError: If the new parent does not exist.
            CycleDetectedError: If the move would make the folder its own ancestor.
        """
        async with self.hierarchy_lock():
            folder = await self.get_folder(folder_id)

            values: dict[str, Any] = {"updated_at": utcnow()}

            if name is not UNSET:
                cleaned = (name or "").strip()
                if not cleaned:
                    raise InvalidArgumentError("Folder name must not be empty")
                values["name"] = cleaned

            if parent_id is not UNSET:
                if parent_id is not None:
                    await self._check_move(folder_id, parent_id)
                values["parent_id"] = parent_id

            for key, value in values.items():
                setattr(folder, key, value)
            await self.db.flush()
            folder = await self.get_folder(folder_id)

        logger.info(
            "folder_updated",
            folder_id=folder_id,
            fields=sorted(k for k in values if k != "updated_at"),
        )
        return folder

    async def delete_folder(self, folder_id: str) -> dict[str, int]:
        """Delete a folder and its whole subtree, unfiling every design inside.

        Designs are never deleted: every design filed anywhere in the subtree
        gets ``folder_id = NULL`` before any folder row is removed.

        Returns:
            Counts of unfiled designs and deleted folders.

        Raises:
            NotFoundError: If the folder does not exist.
        """
        async with self.hierarchy_lock():
            await self.get_folder(folder_id)

            # Claim the write lock before walking the tree so the walk and the
            # deletes see the same snapshot
            await self.db.execute(
                update(Folder).where(Folder.id == folder_id).values(updated_at=utcnow())
            )

            subtree = await self.collect_subtree(folder_id)

            result = await self.db.execute(
                update(Design)
                .where(Design.folder_id.in_(subtree))
                .values(folder_id=None)
                .execution_options(synchronize_session="fetch")
            )
            unfiled = result.rowcount or 0

            # Children first so the parent FK never dangles mid-statement
            for doomed_id in reversed(subtree):
                await self.db.execute(delete(Folder).where(Folder.id == doomed_id))
            await self.db.flush()

        logger.info(
            "folder_deleted",
            folder_id=folder_id,
            unfiled_designs=unfiled,
            deleted_folders=len(subtree),
        )
        return {"unfiled_designs": unfiled, "deleted_folders": len(subtree)}

    async def collect_subtree(self, folder_id: str) -> list[str]:
        """Return the IDs of a folder and all its descendants, parents before children."""
        ordered: list[str] = []
        seen: set[str] = set()
        stack = [folder_id]

        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)
            ordered.append(current)

            result = await self.db.execute(
                select(Folder.id).where(Folder.parent_id == current)
            )
            stack.extend(result.scalars().all())

        return ordered

    async def list_folders(self) -> list[dict[str, Any]]:
        """List every folder with its direct design and subfolder counts.

        Returns:
            List of folder dictionaries ordered by name.
        """
        design_count = (
            select(func.count(Design.id))
            .where(Design.folder_id == Folder.id)
            .correlate(Folder)
            .scalar_subquery()
        )
        child = Folder.__table__.alias("child")
        subfolder_count = (
            select(func.count(child.c.id))
            .where(child.c.parent_id == Folder.id)
            .correlate(Folder)
            .scalar_subquery()
        )

        result = await self.db.execute(
            select(Folder, design_count.label("design_count"), subfolder_count.label("subfolder_count"))
            .order_by(Folder.name.asc())
        )

        return [
            {
                "id": folder.id,
                "name": folder.name,
                "parent_id": folder.parent_id,
                "created_at": folder.created_at,
                "updated_at": folder.updated_at,
                "design_count": designs or 0,
                "subfolder_count": subfolders or 0,
            }
            for folder, designs, subfolders in result.all()
        ]

    async def _require_parent(self, parent_id: str) -> None:
        """Ensure a referenced parent folder exists."""
        result = await self.db.execute(select(Folder.id).where(Folder.id == parent_id))
        if result.scalar_one_or_none() is None:
            raise InvalidReferenceError(f"Parent folder not found: {parent_id}")

    async def _check_move(self, folder_id: str, parent_id: str) -> None:
        """Reject moves that would put a folder underneath itself.

        Walks the ancestor chain of the proposed parent up to the root.
        """
        if parent_id == folder_id:
            raise CycleDetectedError(folder_id, parent_id)

        await self._require_parent(parent_id)

        seen: set[str] = set()
        current: str | None = parent_id
        while current is not None and current not in seen:
            if current == folder_id:
                raise CycleDetectedError(folder_id, parent_id)
            seen.add(current)
            result = await self.db.execute(
                select(Folder.parent_id).where(Folder.id == current)
            )
            current = result.scalar_one_or_none()
