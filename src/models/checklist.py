"""Checklist data models: items, categories, filters and statistics."""

import random
import string
import time
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_id() -> str:
    """Generate an id of the form '<epoch-ms>-<9 random base36 chars>'."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{int(time.time() * 1000)}-{suffix}"


class Priority(str, Enum):
    """Checklist item priority levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


# Lower rank sorts first
PRIORITY_RANK = {
    Priority.URGENT: 0,
    Priority.HIGH: 1,
    Priority.MEDIUM: 2,
    Priority.LOW: 3,
}


class ItemStatus(str, Enum):
    """Checklist item lifecycle states."""
    PENDING = "pending"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class SortField(str, Enum):
    """Fields the visible ordering can be sorted by."""
    ORDER = "order"
    TITLE = "title"
    PRIORITY = "priority"
    DUE_DATE = "due_date"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ChecklistItem(BaseModel):
    """A single task on the checklist."""

    id: str = Field(default_factory=generate_id)

    # Core fields
    title: str
    description: Optional[str] = None
    notes: Optional[str] = None

    # Classification
    completed: bool = False
    status: ItemStatus = ItemStatus.PENDING
    priority: Priority = Priority.MEDIUM
    category_id: str = "default"
    tags: List[str] = Field(default_factory=list)

    # Timing
    due_date: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    # Position in the raw ordering (fractional values allowed)
    order: float = 0

    def touch(self) -> None:
        """Refresh the modification timestamp."""
        self.updated_at = datetime.now()

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        """Whether the item is still open past its due date."""
        if self.completed or self.due_date is None:
            return False
        return self.due_date < (now or datetime.now())


class Category(BaseModel):
    """A named group of checklist items."""

    id: str = Field(default_factory=generate_id)
    name: str
    color: str = "#3B82F6"
    icon: Optional[str] = None
    description: Optional[str] = None
    order: int = 0
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class ChecklistFilter(BaseModel):
    """Criteria that turn the raw item list into the visible ordering."""

    category_id: Optional[str] = None
    priority: Optional[Priority] = None
    status: Optional[ItemStatus] = None
    completed: Optional[bool] = None
    search_term: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    due_date_from: Optional[datetime] = None
    due_date_to: Optional[datetime] = None
    sort_by: SortField = SortField.ORDER
    sort_order: SortOrder = SortOrder.ASC


class ChecklistStats(BaseModel):
    """Aggregate counts over all items."""

    total: int = 0
    completed: int = 0
    pending: int = 0
    overdue: int = 0
    by_priority: Dict[Priority, int] = Field(
        default_factory=lambda: {p: 0 for p in Priority}
    )
    by_category: Dict[str, int] = Field(default_factory=dict)
