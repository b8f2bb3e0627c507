"""
Bulk operations over the current selection, with undo/redo.

Provides:
- Selection over the visible (filtered, sorted) items: toggle, ranges,
  select all, invert
- Bulk delete, completion, move, priority, tag and duplicate operations,
  each recorded as a single undoable action
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from ..models.checklist import ChecklistItem, ItemStatus, Priority
from ..stores.checklist import ChecklistStore
from .actions import (
    Action,
    BulkPayload,
    DeletePayload,
    DuplicatePayload,
    FieldPayload,
    create_bulk_action,
    snapshot_fields,
)
from .undo_manager import UndoRedoManager

logger = logging.getLogger(__name__)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


class BulkOperations:
    """Selection state plus undoable bulk mutations over a checklist store."""

    def __init__(
        self,
        store: ChecklistStore,
        undo_manager: UndoRedoManager,
        duplicate_title_suffix: str = " (Copy)",
    ):
        self.store = store
        self.undo_manager = undo_manager
        self.duplicate_title_suffix = duplicate_title_suffix

        # Insertion-ordered set of selected ids
        self._selected: Dict[str, None] = {}
        self.is_selection_mode = False
        self.last_selected_index = -1
        self.last_selected_id: Optional[str] = None

    # ==================== SELECTION STATE ====================

    @property
    def selected_task_ids(self) -> List[str]:
        return list(self._selected)

    @property
    def selected_count(self) -> int:
        return len(self._selected)

    @property
    def has_selection(self) -> bool:
        return len(self._selected) > 0

    @property
    def selected_tasks(self) -> List[ChecklistItem]:
        """Selected items that still exist in the store."""
        items = (self.store.find(item_id) for item_id in self._selected)
        return [item for item in items if item is not None]

    @property
    def all_tasks_selected(self) -> bool:
        visible = self.store.filtered_items
        return len(visible) > 0 and all(item.id in self._selected for item in visible)

    @property
    def some_tasks_selected(self) -> bool:
        return self.has_selection and not self.all_tasks_selected

    def is_selected(self, task_id: str) -> bool:
        return task_id in self._selected

    # ==================== SELECTION ====================

    def enter_selection_mode(self) -> None:
        self.is_selection_mode = True

    def exit_selection_mode(self) -> None:
        self.is_selection_mode = False
        self.clear_selection()

    def toggle_selection(self, task_id: str) -> None:
        """Flip membership of one item and make it the range anchor."""
        if self.store.find(task_id) is None:
            return

        if task_id in self._selected:
            del self._selected[task_id]
            if not self._selected:
                self.is_selection_mode = False
        else:
            self._selected[task_id] = None
            self.is_selection_mode = True

        index = self._visible_index(task_id)
        if index is not None:
            self.last_selected_index = index
            self.last_selected_id = task_id

    def select_range(self, from_id: str, to_id: str) -> None:
        """Select every visible item between two ids, inclusive, in either order."""
        visible = self.store.filtered_items
        ids = [item.id for item in visible]
        if from_id not in ids or to_id not in ids:
            return

        from_index = ids.index(from_id)
        to_index = ids.index(to_id)
        start, end = min(from_index, to_index), max(from_index, to_index)

        for item_id in ids[start:end + 1]:
            self._selected[item_id] = None
        self.is_selection_mode = True

    def select_range_from_last(self, to_id: str) -> None:
        """Extend from the anchor to `to_id`, or toggle when there is no anchor."""
        if self.last_selected_id:
            self.select_range(self.last_selected_id, to_id)
        else:
            self.toggle_selection(to_id)

    def select_all(self) -> None:
        """Select every visible item."""
        for item in self.store.filtered_items:
            self._selected[item.id] = None
        if self._selected:
            self.is_selection_mode = True

    def clear_selection(self) -> None:
        self._selected = {}
        self.last_selected_index = -1
        self.last_selected_id = None

    def invert_selection(self) -> None:
        """Select exactly the visible items that are not selected."""
        self._selected = {
            item.id: None
            for item in self.store.filtered_items
            if item.id not in self._selected
        }
        self.is_selection_mode = bool(self._selected)

    def _visible_index(self, task_id: str) -> Optional[int]:
        for index, item in enumerate(self.store.filtered_items):
            if item.id == task_id:
                return index
        return None

    def _affected_ids(self) -> List[str]:
        """Fix the target ids: selected items still present, in selection order."""
        return [item_id for item_id in self._selected if self.store.find(item_id) is not None]

    # ==================== BULK OPERATIONS ====================

    async def bulk_delete(self) -> Optional[Action]:
        """Delete the selected items as one undoable action."""
        task_ids = self._affected_ids()
        if not task_ids:
            return self._finish_noop()

        items = [self.store.find(item_id).model_copy(deep=True) for item_id in task_ids]
        positions = {item_id: self.store.index_of(item_id) for item_id in task_ids}

        payload = DeletePayload(task_ids=task_ids, items=items, positions=positions)
        return await self._run(f"Delete {_plural(len(task_ids), 'task')}", payload)

    async def bulk_complete(self, completed: bool = True) -> Optional[Action]:
        """Mark the selected items completed or pending."""
        state = ItemStatus.COMPLETED.value if completed else ItemStatus.PENDING.value
        return await self._run_field_operation(
            "complete",
            completed,
            lambda count: f"Mark {_plural(count, 'task')} as {state}",
        )

    async def bulk_move(self, category_id: str) -> Optional[Action]:
        """Move the selected items to another category."""
        category = self.store.find_category(category_id)
        category_name = category.name if category else "Unknown"
        return await self._run_field_operation(
            "move",
            category_id,
            lambda count: f"Move {_plural(count, 'task')} to {category_name}",
        )

    async def bulk_set_priority(self, priority: Priority) -> Optional[Action]:
        """Set one priority on every selected item."""
        priority = Priority(priority)
        return await self._run_field_operation(
            "priority",
            priority,
            lambda count: f"Set priority to {priority.value} for {_plural(count, 'task')}",
        )

    async def bulk_add_tags(self, tags: List[str]) -> Optional[Action]:
        """Add tags to the selected items, skipping ones already present."""
        if not tags:
            return None
        tags = list(tags)
        return await self._run_field_operation(
            "add_tags",
            tags,
            lambda count: f"Add {_plural(len(tags), 'tag')} to {_plural(count, 'task')}",
        )

    async def bulk_remove_tags(self, tags: List[str]) -> Optional[Action]:
        """Remove tags from the selected items."""
        if not tags:
            return None
        tags = list(tags)
        return await self._run_field_operation(
            "remove_tags",
            tags,
            lambda count: f"Remove {_plural(len(tags), 'tag')} from {_plural(count, 'task')}",
        )

    async def bulk_duplicate(self) -> Optional[Action]:
        """
        Copy the selected items.

        The copies are created immediately with fresh ids; the recorded
        action only removes them on undo and puts the same copies back on
        redo.
        """
        task_ids = self._affected_ids()
        if not task_ids:
            return self._finish_noop()

        # Copies are created before the action is recorded, so never create
        # them when the engine would drop the action
        if self.undo_manager.is_executing:
            logger.debug("Duplicate dropped while another operation was in flight")
            self.exit_selection_mode()
            return None

        created: List[ChecklistItem] = []
        for item_id in task_ids:
            source = self.store.find(item_id)
            duplicate = self.store.add_item({
                "title": f"{source.title}{self.duplicate_title_suffix}",
                "description": source.description,
                "notes": source.notes,
                "completed": False,
                "status": ItemStatus.PENDING,
                "priority": source.priority,
                "due_date": source.due_date,
                "category_id": source.category_id,
                "tags": list(source.tags),
                "order": source.order + 0.5,
            })
            created.append(duplicate.model_copy(deep=True))

        payload = DuplicatePayload(source_ids=task_ids, items=created)
        return await self._run(f"Duplicate {_plural(len(task_ids), 'task')}", payload)

    # ==================== HELPERS ====================

    async def _run_field_operation(
        self,
        operation: str,
        value: Any,
        describe: Callable[[int], str],
    ) -> Optional[Action]:
        task_ids = self._affected_ids()
        if not task_ids:
            return self._finish_noop()

        previous = {
            item_id: snapshot_fields(self.store.find(item_id), operation)
            for item_id in task_ids
        }
        payload = FieldPayload(
            operation=operation,
            task_ids=task_ids,
            value=value,
            previous=previous,
        )
        return await self._run(describe(len(task_ids)), payload)

    async def _run(self, description: str, payload: BulkPayload) -> Optional[Action]:
        action = create_bulk_action(self.store, description, payload)
        try:
            await self.undo_manager.execute(action)
        finally:
            self.exit_selection_mode()

        if not any(recorded is action for recorded in self.undo_manager.get_history()):
            logger.debug(f"Bulk operation dropped while another was in flight: {description}")
            return None

        logger.info(f"Bulk operation: {description}")
        return action

    def _finish_noop(self) -> None:
        # Selection held only stale ids
        if self._selected:
            self.exit_selection_mode()
        return None
