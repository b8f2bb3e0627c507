"""
Undo/redo history engine.

Provides:
- A capacity-bounded, cursor-based action history
- Strictly serialized execute/undo/redo (overlapping calls are dropped)
- Multi-step undo/redo
- Synchronous change notifications for UI state
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .actions import Action, Effect

logger = logging.getLogger(__name__)

DEFAULT_MAX_HISTORY_SIZE = 50


@dataclass(frozen=True)
class HistoryChange:
    """Snapshot of engine state delivered to listeners after every change."""
    can_undo: bool
    can_redo: bool
    history_size: int
    current_index: int


HistoryListener = Callable[[HistoryChange], None]


async def _run_effect(effect: Effect) -> None:
    """Call an action effect, awaiting it when it is asynchronous."""
    result = effect()
    if inspect.isawaitable(result):
        await result


class UndoRedoManager:
    """Cursor-based undo/redo manager.

    `current_index` points at the most recently applied action; -1 means
    nothing has been applied. Actions after the cursor form the redo branch.
    """

    def __init__(self, max_history_size: int = DEFAULT_MAX_HISTORY_SIZE):
        self._history: List[Action] = []
        self._current_index = -1
        self._max_history_size = max(1, max_history_size)
        self._is_executing = False
        self._listeners: List[HistoryListener] = []

    # ==================== STATE ====================

    @property
    def can_undo(self) -> bool:
        return self._current_index >= 0

    @property
    def can_redo(self) -> bool:
        return self._current_index < len(self._history) - 1

    @property
    def undo_description(self) -> str:
        if self.can_undo:
            return self._history[self._current_index].description
        return ""

    @property
    def redo_description(self) -> str:
        if self.can_redo:
            return self._history[self._current_index + 1].description
        return ""

    @property
    def history_size(self) -> int:
        return len(self._history)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def max_history_size(self) -> int:
        return self._max_history_size

    @property
    def is_executing(self) -> bool:
        return self._is_executing

    def get_history(self) -> List[Action]:
        """Applied actions, oldest first."""
        return self._history[: self._current_index + 1]

    def get_redo_stack(self) -> List[Action]:
        """Actions available to redo, in the order they would be redone."""
        return self._history[self._current_index + 1:]

    # ==================== LISTENERS ====================

    def add_listener(self, listener: HistoryListener) -> None:
        """Register a callback invoked after every history change."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: HistoryListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def remove_all_listeners(self) -> None:
        self._listeners = []

    def _emit_history_change(self) -> None:
        change = HistoryChange(
            can_undo=self.can_undo,
            can_redo=self.can_redo,
            history_size=len(self._history),
            current_index=self._current_index,
        )
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception as e:
                logger.error(f"History listener failed: {e}")

    # ==================== OPERATIONS ====================

    async def execute(self, action: Action) -> None:
        """
        Record an action at the cursor and run its forward effect.

        Any redo branch is discarded. When the history is full the oldest
        action is evicted. Dropped silently if another operation is running.

        Args:
            action: The action to record and apply
        """
        if self._is_executing:
            logger.debug(f"Dropped execute of '{action.description}': operation in flight")
            return

        self._is_executing = True
        try:
            # Clear redo branch
            del self._history[self._current_index + 1:]

            self._history.append(action)

            if len(self._history) > self._max_history_size:
                evicted = self._history.pop(0)
                logger.debug(f"Evicted oldest action: {evicted.description}")
            else:
                self._current_index += 1

            await _run_effect(action.apply)

            logger.info(f"Executed action {action.id}: {action.description}")
            self._emit_history_change()
        finally:
            self._is_executing = False

    async def undo(self) -> Optional[Action]:
        """
        Revert the action at the cursor.

        Returns:
            The undone action, or None if there is nothing to undo or
            another operation is running
        """
        if not self.can_undo or self._is_executing:
            return None

        self._is_executing = True
        try:
            action = self._history[self._current_index]
            await _run_effect(action.revert)
            # History may have been cleared or shrunk while the revert was awaited
            self._current_index = max(-1, min(self._current_index - 1, len(self._history) - 1))

            logger.info(f"Undone action {action.id}: {action.description}")
            self._emit_history_change()
            return action
        finally:
            self._is_executing = False

    async def redo(self) -> Optional[Action]:
        """
        Re-apply the action after the cursor.

        Returns:
            The redone action, or None if there is nothing to redo or
            another operation is running
        """
        if not self.can_redo or self._is_executing:
            return None

        self._is_executing = True
        try:
            self._current_index += 1
            action = self._history[self._current_index]
            await _run_effect(action.apply)
            self._current_index = max(-1, min(self._current_index, len(self._history) - 1))

            logger.info(f"Redone action {action.id}: {action.description}")
            self._emit_history_change()
            return action
        finally:
            self._is_executing = False

    async def undo_multiple(self, count: int) -> List[Action]:
        """Undo up to `count` actions, stopping at the start of history."""
        undone: List[Action] = []
        for _ in range(count):
            if not self.can_undo:
                break
            action = await self.undo()
            if action is None:
                break
            undone.append(action)
        return undone

    async def redo_multiple(self, count: int) -> List[Action]:
        """Redo up to `count` actions, stopping at the end of history."""
        redone: List[Action] = []
        for _ in range(count):
            if not self.can_redo:
                break
            action = await self.redo()
            if action is None:
                break
            redone.append(action)
        return redone

    def clear(self) -> None:
        """Drop all history."""
        self._history = []
        self._current_index = -1
        logger.info("Cleared undo history")
        self._emit_history_change()

    def set_max_history_size(self, size: int) -> None:
        """Change capacity (minimum 1), evicting the oldest actions to fit."""
        self._max_history_size = max(1, size)

        if len(self._history) > self._max_history_size:
            remove_count = len(self._history) - self._max_history_size
            self._history = self._history[remove_count:]
            self._current_index = max(-1, self._current_index - remove_count)
            logger.debug(f"Evicted {remove_count} actions after capacity change")
