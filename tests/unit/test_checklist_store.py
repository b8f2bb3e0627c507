"""
Unit tests for ChecklistStore.

Tests item and category CRUD, filtering, sorting and statistics.
"""

from datetime import datetime, timedelta

import pytest

from src.models.checklist import ChecklistItem, ItemStatus, Priority
from src.stores.checklist import ChecklistStore, DEFAULT_CATEGORY_ID
from src.stores.exceptions import DuplicateEntityError, EntityNotFoundError


def titles(items):
    return [item.title for item in items]


class TestItemCrud:
    """Tests for item operations."""

    def test_default_category_created(self):
        store = ChecklistStore()
        assert [c.name for c in store.categories] == ["General"]

    def test_no_default_category(self):
        assert ChecklistStore(default_category_name=None).categories == []

    def test_add_item_ignores_supplied_id(self, store):
        """New items always get a fresh id."""
        item = store.add_item({"id": "fixed", "title": "New"})
        assert item.id != "fixed"
        assert store.find(item.id) is item

    def test_insert_at_index(self, store):
        item = ChecklistItem(title="Inserted")
        store.insert(item, 1)
        assert titles(store.items)[:3] == ["T1", "Inserted", "T2"]

    def test_insert_duplicate_id_raises(self, store, tasks):
        with pytest.raises(DuplicateEntityError):
            store.insert(tasks[0].model_copy())

    def test_remove_by_id(self, store, tasks):
        removed = store.remove_by_id(tasks[0].id)
        assert removed is tasks[0]
        assert store.remove_by_id(tasks[0].id) is None
        assert store.delete_item(tasks[0].id) is False

    def test_update_missing_item_raises(self, store):
        with pytest.raises(EntityNotFoundError):
            store.update_item("missing", {"title": "x"})

    def test_update_item_protects_id(self, store, tasks):
        item = store.update_item(tasks[0].id, {"id": "other", "title": "Renamed"})
        assert item.id == tasks[0].id
        assert item.title == "Renamed"

    def test_toggle_item_complete(self, store, tasks):
        item = store.toggle_item_complete(tasks[0].id)
        assert item.completed is True
        assert item.status == ItemStatus.COMPLETED
        assert store.toggle_item_complete("missing") is None

    def test_reorder_items(self, store, tasks):
        """Dragging renumbers order to match raw position."""
        assert store.reorder_items(tasks[4].id, tasks[0].id) is True
        assert titles(store.items) == ["T5", "T1", "T2", "T3", "T4"]
        assert [i.order for i in store.items] == [0, 1, 2, 3, 4]
        assert store.reorder_items("missing", tasks[0].id) is False


class TestCategories:
    """Tests for category operations."""

    def test_delete_category_moves_items_to_default(self, store, tasks):
        category = store.add_category({"name": "Work"})
        store.update_item(tasks[0].id, {"category_id": category.id})

        assert store.delete_category(category.id) is True
        assert store.find(tasks[0].id).category_id == DEFAULT_CATEGORY_ID
        assert store.delete_category(category.id) is False

    def test_update_category(self, store):
        category = store.categories[0]
        store.update_category(category.id, {"name": "Inbox"})
        assert store.find_category(category.id).name == "Inbox"

        with pytest.raises(EntityNotFoundError):
            store.update_category("missing", {"name": "x"})


class TestFiltering:
    """Tests for the visible ordering."""

    def test_search_matches_title_description_and_tags(self, store, tasks):
        store.update_item(tasks[1].id, {"tags": ["Kitchen"]})
        store.set_filter({"search_term": "kitchen"})
        assert titles(store.filtered_items) == ["T2"]

        store.set_filter({"search_term": "NUMBER 3"})
        assert titles(store.filtered_items) == ["T3"]

    def test_tags_filter_matches_any(self, store, tasks):
        store.update_item(tasks[0].id, {"tags": ["a"]})
        store.update_item(tasks[1].id, {"tags": ["b"]})
        store.set_filter({"tags": ["a", "b"]})
        assert titles(store.filtered_items) == ["T1", "T2"]

    def test_completed_filter(self, store, tasks):
        store.toggle_item_complete(tasks[2].id)
        store.set_filter({"completed": True})
        assert titles(store.filtered_items) == ["T3"]

    def test_due_date_range(self, store, tasks):
        now = datetime.now()
        store.update_item(tasks[0].id, {"due_date": now - timedelta(days=1)})
        store.update_item(tasks[1].id, {"due_date": now + timedelta(days=5)})
        store.set_filter({"due_date_from": now})
        assert titles(store.filtered_items) == ["T2"]

    def test_sort_by_priority(self, store, tasks):
        store.update_item(tasks[3].id, {"priority": Priority.URGENT})
        store.update_item(tasks[0].id, {"priority": Priority.LOW})
        store.set_filter({"sort_by": "priority"})
        assert titles(store.filtered_items) == ["T4", "T2", "T3", "T5", "T1"]

    def test_sort_by_due_date_missing_last(self, store, tasks):
        now = datetime.now()
        store.update_item(tasks[2].id, {"due_date": now + timedelta(days=2)})
        store.update_item(tasks[4].id, {"due_date": now + timedelta(days=1)})
        store.set_filter({"sort_by": "due_date", "sort_order": "desc"})
        assert titles(store.filtered_items)[:2] == ["T3", "T5"]

    def test_sort_by_title_desc(self, store):
        store.set_filter({"sort_by": "title", "sort_order": "desc"})
        assert titles(store.filtered_items) == ["T5", "T4", "T3", "T2", "T1"]

    def test_clear_filter(self, store):
        store.set_filter({"priority": Priority.URGENT})
        assert store.filtered_items == []
        store.clear_filter()
        assert len(store.filtered_items) == 5


class TestAggregates:
    """Tests for stats and tags."""

    def test_stats(self, store, tasks):
        now = datetime.now()
        store.toggle_item_complete(tasks[0].id)
        store.update_item(tasks[1].id, {"due_date": now - timedelta(hours=1)})
        store.update_item(tasks[2].id, {"priority": Priority.HIGH})

        stats = store.stats(now)

        assert stats.total == 5
        assert stats.completed == 1
        assert stats.pending == 4
        assert stats.overdue == 1
        assert stats.by_priority[Priority.HIGH] == 1
        assert stats.by_priority[Priority.MEDIUM] == 4
        assert sum(stats.by_category.values()) == 5

    def test_all_tags_first_seen_order(self, store, tasks):
        store.update_item(tasks[0].id, {"tags": ["z", "base"]})
        assert store.all_tags() == ["z", "base"]

    def test_clear_all(self, store):
        store.clear_all()
        assert store.items == []
        assert store.categories == []
