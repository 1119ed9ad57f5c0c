"""Utility functions for Draftbox."""

from draftbox.utils.ids import new_id, utcnow

__all__ = [
    "new_id",
    "utcnow",
]
