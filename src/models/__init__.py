from .checklist import (
    ChecklistItem,
    Category,
    ChecklistFilter,
    ChecklistStats,
    ItemStatus,
    Priority,
    PRIORITY_RANK,
    SortField,
    SortOrder,
    generate_id,
)

__all__ = [
    "ChecklistItem",
    "Category",
    "ChecklistFilter",
    "ChecklistStats",
    "ItemStatus",
    "Priority",
    "PRIORITY_RANK",
    "SortField",
    "SortOrder",
    "generate_id",
]
