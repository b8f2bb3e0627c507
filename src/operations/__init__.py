"""
Operations module for undoable and bulk checklist operations.
"""

from .actions import (
    Action,
    ActionType,
    DeletePayload,
    DuplicatePayload,
    FieldPayload,
    apply_payload,
    create_action,
    create_bulk_action,
    revert_payload,
)
from .bulk import BulkOperations
from .undo_manager import HistoryChange, UndoRedoManager

__all__ = [
    "Action",
    "ActionType",
    "DeletePayload",
    "DuplicatePayload",
    "FieldPayload",
    "apply_payload",
    "create_action",
    "create_bulk_action",
    "revert_payload",
    "BulkOperations",
    "HistoryChange",
    "UndoRedoManager",
]
