"""Custom exceptions for checklist store operations."""


class ChecklistStoreError(Exception):
    """Base exception for checklist store errors."""
    pass


class EntityNotFoundError(ChecklistStoreError):
    """Requested entity not found."""
    pass


class DuplicateEntityError(ChecklistStoreError):
    """An entity with the same id is already stored."""
    pass
