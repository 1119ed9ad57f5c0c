"""Database models for Draftbox."""

from draftbox.db.models.design import Design
from draftbox.db.models.design_tag import DesignTag
from draftbox.db.models.folder import Folder
from draftbox.db.models.tag import Tag

__all__ = [
    "Design",
    "DesignTag",
    "Folder",
    "Tag",
]
