# src/pebbles/gui/controllers/__init__.py
"""Controllers coordinate events <-> core state (sync loops, list query, expansion)."""

from pebbles.gui.controllers.expansion_controller import ExpansionController
from pebbles.gui.controllers.list_view_controller import ListViewController
from pebbles.gui.controllers.sync_controllers import CollectionSyncController, RecordSyncController

__all__ = [
    "CollectionSyncController",
    "ExpansionController",
    "ListViewController",
    "RecordSyncController",
]
