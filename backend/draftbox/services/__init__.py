"""Business logic services for Draftbox."""

from draftbox.services.autosave import AutosaveCoordinator, SaveStatus, design_persister
from draftbox.services.design import DesignService
from draftbox.services.folder import FolderService
from draftbox.services.search import SearchService
from draftbox.services.tag import TagService

__all__ = [
    "AutosaveCoordinator",
    "DesignService",
    "FolderService",
    "SaveStatus",
    "SearchService",
    "TagService",
    "design_persister",
]
