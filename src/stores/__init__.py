"""Entity stores for checklist data."""

from .checklist import ChecklistStore, DEFAULT_CATEGORY_ID
from .exceptions import ChecklistStoreError, EntityNotFoundError, DuplicateEntityError

__all__ = [
    "ChecklistStore",
    "DEFAULT_CATEGORY_ID",
    "ChecklistStoreError",
    "EntityNotFoundError",
    "DuplicateEntityError",
]
