"""
Undoable actions and the data-first payloads bulk operations record.

An Action pairs a forward effect (apply) with a backward effect (revert).
Bulk actions keep the affected ids and the snapshotted prior values as
plain payload models; their effects are the generic executors below bound
to an explicit store, so replaying an action never depends on state that
changed after it was created.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from functools import partial
from typing import Any, Awaitable, Callable, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from ..models.checklist import ChecklistItem, ItemStatus, generate_id
from ..stores.checklist import ChecklistStore

logger = logging.getLogger(__name__)

Effect = Callable[[], Union[None, Awaitable[None]]]


class ActionType(str, Enum):
    """What kind of change an action represents. Informational only."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    MOVE = "move"
    BULK = "bulk"
    TOGGLE = "toggle"


@dataclass(frozen=True)
class Action:
    """An immutable record of one reversible change."""

    type: ActionType
    description: str
    payload: Any
    apply: Effect
    revert: Effect
    id: str = field(default_factory=generate_id)
    timestamp: datetime = field(default_factory=datetime.now)


def create_action(
    action_type: ActionType,
    description: str,
    payload: Any,
    revert: Effect,
    apply: Effect,
) -> Action:
    """Build an action with a fresh id and timestamp."""
    return Action(
        type=ActionType(action_type),
        description=description,
        payload=payload,
        apply=apply,
        revert=revert,
    )


# ==================== BULK PAYLOADS ====================

FieldOperation = Literal["complete", "move", "priority", "add_tags", "remove_tags"]


class DeletePayload(BaseModel):
    """Full snapshots of deleted items and their raw positions."""
    kind: Literal["delete"] = "delete"
    task_ids: List[str]
    items: List[ChecklistItem]
    positions: Dict[str, int] = Field(default_factory=dict)


class FieldPayload(BaseModel):
    """A new value for a set of items plus each item's prior field values."""
    kind: Literal["fields"] = "fields"
    operation: FieldOperation
    task_ids: List[str]
    value: Any = None
    previous: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


class DuplicatePayload(BaseModel):
    """Copies created by a duplication, kept so redo restores the same ids."""
    kind: Literal["duplicate"] = "duplicate"
    source_ids: List[str]
    items: List[ChecklistItem]

    @property
    def created_ids(self) -> List[str]:
        return [item.id for item in self.items]


BulkPayload = Union[DeletePayload, FieldPayload, DuplicatePayload]


def snapshot_fields(item: ChecklistItem, operation: str) -> Dict[str, Any]:
    """Capture exactly the fields an operation is about to change."""
    if operation == "complete":
        return {"completed": item.completed, "status": item.status}
    elif operation == "move":
        return {"category_id": item.category_id}
    elif operation == "priority":
        return {"priority": item.priority}
    elif operation in ("add_tags", "remove_tags"):
        return {"tags": list(item.tags)}
    else:
        raise ValueError(f"Unknown bulk operation: {operation}")


# ==================== EXECUTORS ====================

def apply_payload(store: ChecklistStore, payload: BulkPayload) -> None:
    """Forward effect for a bulk payload."""
    if isinstance(payload, DeletePayload):
        _apply_delete(store, payload)
    elif isinstance(payload, FieldPayload):
        _apply_fields(store, payload)
    elif isinstance(payload, DuplicatePayload):
        _restore_items(store, payload.items)
    else:
        raise ValueError(f"Unknown bulk payload: {type(payload).__name__}")


def revert_payload(store: ChecklistStore, payload: BulkPayload) -> None:
    """Backward effect for a bulk payload."""
    if isinstance(payload, DeletePayload):
        _restore_items(store, payload.items, payload.positions)
    elif isinstance(payload, FieldPayload):
        _restore_fields(store, payload)
    elif isinstance(payload, DuplicatePayload):
        for item_id in payload.created_ids:
            store.remove_by_id(item_id)
    else:
        raise ValueError(f"Unknown bulk payload: {type(payload).__name__}")


def create_bulk_action(
    store: ChecklistStore,
    description: str,
    payload: BulkPayload,
) -> Action:
    """Build a bulk action whose effects are the executors bound to `store`."""
    return create_action(
        ActionType.BULK,
        description,
        payload,
        revert=partial(revert_payload, store, payload),
        apply=partial(apply_payload, store, payload),
    )


def _apply_delete(store: ChecklistStore, payload: DeletePayload) -> None:
    for item_id in payload.task_ids:
        if store.remove_by_id(item_id) is None:
            logger.warning(f"Item {item_id} already gone, skipping delete")


def _restore_items(
    store: ChecklistStore,
    items: List[ChecklistItem],
    positions: Optional[Dict[str, int]] = None,
) -> None:
    """Insert copies of snapshot items that are not currently stored."""
    positions = positions or {}
    # Ascending positions so each index is valid once earlier ones are back
    ordered = sorted(items, key=lambda i: positions.get(i.id, float("inf")))
    for item in ordered:
        if store.find(item.id) is not None:
            continue
        store.insert(item.model_copy(deep=True), positions.get(item.id))


def _apply_fields(store: ChecklistStore, payload: FieldPayload) -> None:
    for item_id in payload.task_ids:
        item = store.find(item_id)
        if item is None:
            logger.warning(f"Item {item_id} not found, skipping {payload.operation}")
            continue

        if payload.operation == "complete":
            item.completed = bool(payload.value)
            item.status = ItemStatus.COMPLETED if payload.value else ItemStatus.PENDING
        elif payload.operation == "move":
            item.category_id = payload.value
        elif payload.operation == "priority":
            item.priority = payload.value
        elif payload.operation == "add_tags":
            item.tags = item.tags + [t for t in dict.fromkeys(payload.value) if t not in item.tags]
        elif payload.operation == "remove_tags":
            item.tags = [t for t in item.tags if t not in payload.value]
        else:
            raise ValueError(f"Unknown bulk operation: {payload.operation}")

        item.touch()


def _restore_fields(store: ChecklistStore, payload: FieldPayload) -> None:
    for item_id in payload.task_ids:
        item = store.find(item_id)
        previous = payload.previous.get(item_id)
        if item is None or previous is None:
            logger.warning(f"Item {item_id} not restorable, skipping {payload.operation} undo")
            continue

        for field_name, value in previous.items():
            setattr(item, field_name, list(value) if isinstance(value, list) else value)
        item.touch()
