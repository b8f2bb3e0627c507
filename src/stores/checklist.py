"""
In-memory checklist store.

Handles:
- Item CRUD and raw ordering
- Category CRUD
- Filtering and sorting into the visible ordering
- Aggregate statistics
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from ..models.checklist import (
    Category,
    ChecklistFilter,
    ChecklistItem,
    ChecklistStats,
    ItemStatus,
    PRIORITY_RANK,
    SortField,
    SortOrder,
)
from .exceptions import DuplicateEntityError, EntityNotFoundError

logger = logging.getLogger(__name__)

# Category id that orphaned items fall back to
DEFAULT_CATEGORY_ID = "default"

# Fields callers may not set through add/update
_PROTECTED_FIELDS = {"id", "created_at", "updated_at"}


class ChecklistStore:
    """Store for checklist items and categories."""

    def __init__(
        self,
        default_category_name: Optional[str] = "General",
        default_category_color: str = "#3B82F6",
        default_category_icon: Optional[str] = None,
    ):
        self._items: List[ChecklistItem] = []
        self._categories: List[Category] = []
        self.filter = ChecklistFilter()

        if default_category_name:
            self.add_category({
                "name": default_category_name,
                "color": default_category_color,
                "icon": default_category_icon,
                "order": 0,
            })

    @property
    def items(self) -> List[ChecklistItem]:
        """All items in raw storage order."""
        return self._items

    @property
    def categories(self) -> List[Category]:
        return self._categories

    # ==================== ITEM CRUD ====================

    def find(self, item_id: str) -> Optional[ChecklistItem]:
        """Get an item by id."""
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def index_of(self, item_id: str) -> Optional[int]:
        """Position of an item in the raw ordering."""
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return index
        return None

    def insert(self, item: ChecklistItem, index: Optional[int] = None) -> ChecklistItem:
        """
        Insert an existing item object, keeping its id.

        Args:
            item: Item to store
            index: Raw position to insert at (appends when None)

        Raises:
            DuplicateEntityError: If an item with the same id is stored
        """
        if self.find(item.id) is not None:
            raise DuplicateEntityError(f"Item {item.id} already exists")

        if index is None or index >= len(self._items):
            self._items.append(item)
        else:
            self._items.insert(max(0, index), item)
        return item

    def remove_by_id(self, item_id: str) -> Optional[ChecklistItem]:
        """Remove an item and return it, or None if it is not stored."""
        index = self.index_of(item_id)
        if index is None:
            return None
        return self._items.pop(index)

    def add_item(self, item_data: Dict[str, Any]) -> ChecklistItem:
        """Create a new item with a fresh id and timestamps."""
        data = {k: v for k, v in item_data.items() if k not in _PROTECTED_FIELDS}
        item = ChecklistItem(**data)
        self._items.append(item)
        logger.debug(f"Added item {item.id}: {item.title}")
        return item

    def update_item(self, item_id: str, updates: Dict[str, Any]) -> ChecklistItem:
        """
        Apply field updates to an item.

        Raises:
            EntityNotFoundError: If the item does not exist
        """
        item = self.find(item_id)
        if item is None:
            raise EntityNotFoundError(f"Item {item_id} not found")

        for field, value in updates.items():
            if field in _PROTECTED_FIELDS:
                continue
            setattr(item, field, value)
        item.touch()
        return item

    def delete_item(self, item_id: str) -> bool:
        """Delete an item. Returns False if it did not exist."""
        return self.remove_by_id(item_id) is not None

    def toggle_item_complete(self, item_id: str) -> Optional[ChecklistItem]:
        """Flip completion, keeping status in step."""
        item = self.find(item_id)
        if item is None:
            return None
        item.completed = not item.completed
        item.status = ItemStatus.COMPLETED if item.completed else ItemStatus.PENDING
        item.touch()
        return item

    def reorder_items(self, dragged_id: str, target_id: str) -> bool:
        """Move the dragged item to the target's position and renumber order."""
        dragged_index = self.index_of(dragged_id)
        target_index = self.index_of(target_id)
        if dragged_index is None or target_index is None:
            return False

        dragged = self._items.pop(dragged_index)
        self._items.insert(target_index, dragged)
        for index, item in enumerate(self._items):
            item.order = index
        return True

    # ==================== CATEGORIES ====================

    def find_category(self, category_id: str) -> Optional[Category]:
        for category in self._categories:
            if category.id == category_id:
                return category
        return None

    def add_category(self, category_data: Dict[str, Any]) -> Category:
        """Create a new category with a fresh id."""
        data = {k: v for k, v in category_data.items() if k not in _PROTECTED_FIELDS}
        category = Category(**data)
        self._categories.append(category)
        return category

    def update_category(self, category_id: str, updates: Dict[str, Any]) -> Category:
        """
        Apply field updates to a category.

        Raises:
            EntityNotFoundError: If the category does not exist
        """
        category = self.find_category(category_id)
        if category is None:
            raise EntityNotFoundError(f"Category {category_id} not found")

        for field, value in updates.items():
            if field in _PROTECTED_FIELDS:
                continue
            setattr(category, field, value)
        category.updated_at = datetime.now()
        return category

    def delete_category(self, category_id: str) -> bool:
        """Delete a category, moving its items to the default category."""
        category = self.find_category(category_id)
        if category is None:
            return False

        self._categories.remove(category)
        for item in self._items:
            if item.category_id == category_id:
                item.category_id = DEFAULT_CATEGORY_ID
        return True

    # ==================== FILTERING ====================

    def set_filter(self, new_filter: Union[ChecklistFilter, Dict[str, Any]]) -> None:
        if isinstance(new_filter, dict):
            new_filter = ChecklistFilter(**new_filter)
        self.filter = new_filter

    def clear_filter(self) -> None:
        self.filter = ChecklistFilter()

    @property
    def filtered_items(self) -> List[ChecklistItem]:
        """The visible ordering: items matching the filter, sorted."""
        f = self.filter
        result = list(self._items)

        if f.category_id:
            result = [i for i in result if i.category_id == f.category_id]
        if f.priority:
            result = [i for i in result if i.priority == f.priority]
        if f.status:
            result = [i for i in result if i.status == f.status]
        if f.completed is not None:
            result = [i for i in result if i.completed == f.completed]

        if f.search_term:
            query = f.search_term.lower()
            result = [i for i in result if _matches_search(i, query)]

        if f.tags:
            result = [i for i in result if any(tag in i.tags for tag in f.tags)]

        if f.due_date_from:
            result = [i for i in result if i.due_date and i.due_date >= f.due_date_from]
        if f.due_date_to:
            result = [i for i in result if i.due_date and i.due_date <= f.due_date_to]

        return _sort_items(result, f.sort_by, f.sort_order)

    # ==================== AGGREGATES ====================

    def stats(self, now: Optional[datetime] = None) -> ChecklistStats:
        """Count items by completion, priority and category."""
        now = now or datetime.now()
        stats = ChecklistStats(total=len(self._items))

        for item in self._items:
            if item.completed:
                stats.completed += 1
            else:
                stats.pending += 1
                if item.is_overdue(now):
                    stats.overdue += 1

            stats.by_priority[item.priority] += 1
            stats.by_category[item.category_id] = stats.by_category.get(item.category_id, 0) + 1

        return stats

    def all_tags(self) -> List[str]:
        """Distinct tags across all items, in first-seen order."""
        seen: Dict[str, None] = {}
        for item in self._items:
            for tag in item.tags:
                seen.setdefault(tag, None)
        return list(seen)

    def clear_all(self) -> None:
        self._items = []
        self._categories = []
        self.filter = ChecklistFilter()


def _matches_search(item: ChecklistItem, query: str) -> bool:
    if query in item.title.lower():
        return True
    if item.description and query in item.description.lower():
        return True
    return any(query in tag.lower() for tag in item.tags)


def _sort_items(
    items: List[ChecklistItem],
    sort_by: SortField,
    sort_order: SortOrder,
) -> List[ChecklistItem]:
    reverse = sort_order == SortOrder.DESC

    if sort_by == SortField.DUE_DATE:
        # Items without a due date always sort last
        dated = [i for i in items if i.due_date is not None]
        undated = [i for i in items if i.due_date is None]
        dated.sort(key=lambda i: i.due_date, reverse=reverse)
        return dated + undated

    if sort_by == SortField.TITLE:
        key = lambda i: i.title.lower()
    elif sort_by == SortField.PRIORITY:
        key = lambda i: PRIORITY_RANK[i.priority]
    elif sort_by == SortField.CREATED_AT:
        key = lambda i: i.created_at
    elif sort_by == SortField.UPDATED_AT:
        key = lambda i: i.updated_at
    else:
        key = lambda i: i.order

    return sorted(items, key=key, reverse=reverse)
