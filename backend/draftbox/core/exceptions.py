"""Error kinds raised by the library store and the autosave coordinator."""

from __future__ import annotations


class DraftboxError(Exception):
    """Base exception for all Draftbox errors."""

    def __init__(self, message: str, code: str = "DRAFTBOX_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(DraftboxError):
    """Raised when an operation targets a row that does not exist."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}", "NOT_FOUND")


class InvalidReferenceError(DraftboxError):
    """Raised when a foreign key argument does not resolve."""

    def __init__(self, message: str):
        super().__init__(message, "INVALID_REFERENCE")


class InvalidArgumentError(DraftboxError):
    """Raised when an argument is malformed (e.g. an empty tag name)."""

    def __init__(self, message: str):
        super().__init__(message, "INVALID_ARGUMENT")


class CycleDetectedError(DraftboxError):
    """Raised when a folder move would make a folder its own ancestor."""

    def __init__(self, folder_id: str, parent_id: str):
        self.folder_id = folder_id
        self.parent_id = parent_id
        super().__init__(
            f"Cannot move folder {folder_id} under {parent_id}: it would become its own ancestor",
            "CYCLE_DETECTED",
        )


class SaveFailedError(DraftboxError):
    """Raised (and recorded) when serializing or persisting a document fails."""

    def __init__(self, message: str = "Save failed"):
        super().__init__(message, "SAVE_FAILED")


class UnexpectedError(DraftboxError):
    """Raised on storage-layer faults."""

    def __init__(self, message: str = "Unexpected storage error"):
        super().__init__(message, "UNEXPECTED")
