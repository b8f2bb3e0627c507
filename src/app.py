"""
Checklist Workflow - application session wiring.

Builds the store, the undo/redo manager and the bulk coordinator once per
session and hands them to whoever needs them.
"""

import logging
import sys
from dataclasses import dataclass
from typing import Optional

from config.settings import Settings, get_settings
from .operations.bulk import BulkOperations
from .operations.undo_manager import UndoRedoManager
from .stores.checklist import ChecklistStore

logger = logging.getLogger(__name__)


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure root logging from settings."""
    settings = settings or get_settings()
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


@dataclass
class ChecklistSession:
    """Everything one application session owns."""
    settings: Settings
    store: ChecklistStore
    undo_manager: UndoRedoManager
    bulk: BulkOperations

    def shutdown(self) -> None:
        """Drop history, listeners and selection at the end of the session."""
        self.bulk.exit_selection_mode()
        self.undo_manager.remove_all_listeners()
        self.undo_manager.clear()
        logger.info(f"{self.settings.app_name} session closed")


def create_session(settings: Optional[Settings] = None) -> ChecklistSession:
    """Create a new session with its own store and history."""
    settings = settings or get_settings()

    store = ChecklistStore(
        default_category_name=settings.default_category_name,
        default_category_color=settings.default_category_color,
        default_category_icon=settings.default_category_icon,
    )
    undo_manager = UndoRedoManager(max_history_size=settings.undo_history_size)
    bulk = BulkOperations(
        store,
        undo_manager,
        duplicate_title_suffix=settings.duplicate_title_suffix,
    )

    logger.info(
        f"Starting {settings.app_name} session "
        f"(environment={settings.environment}, undo history={undo_manager.max_history_size})"
    )
    return ChecklistSession(settings=settings, store=store, undo_manager=undo_manager, bulk=bulk)
