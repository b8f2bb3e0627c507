"""
Pytest configuration and shared fixtures.
"""

import pytest
from typing import List

from config.settings import Settings
from src.models.checklist import Priority
from src.operations.actions import ActionType, create_action
from src.operations.bulk import BulkOperations
from src.operations.undo_manager import UndoRedoManager
from src.stores.checklist import ChecklistStore


@pytest.fixture
def test_settings():
    """Settings isolated from the environment."""
    return Settings(
        _env_file=None,
        app_name="Checklist Test",
        environment="test",
        undo_history_size=50,
    )


@pytest.fixture
def store():
    """Store with five ordered items T1..T5 in the default category."""
    store = ChecklistStore()
    category_id = store.categories[0].id
    for index in range(1, 6):
        store.add_item({
            "title": f"T{index}",
            "description": f"Task number {index}",
            "priority": Priority.MEDIUM,
            "category_id": category_id,
            "tags": ["base"],
            "order": index,
        })
    return store


@pytest.fixture
def tasks(store):
    """The sample items in visible order."""
    return list(store.filtered_items)


@pytest.fixture
def undo_manager():
    """Create a fresh undo manager for testing."""
    return UndoRedoManager()


@pytest.fixture
def bulk_ops(store, undo_manager):
    """Bulk coordinator wired to the sample store."""
    return BulkOperations(store, undo_manager)


@pytest.fixture
def make_action():
    """Factory for counter actions that log their effects."""

    def _make(name: str, log: List[str], counter: dict = None):
        counter = counter if counter is not None else {}

        def apply():
            counter[name] = counter.get(name, 0) + 1
            log.append(f"apply:{name}")

        def revert():
            counter[name] = counter.get(name, 0) - 1
            log.append(f"revert:{name}")

        return create_action(ActionType.UPDATE, f"Action {name}", {"name": name}, revert, apply)

    return _make
