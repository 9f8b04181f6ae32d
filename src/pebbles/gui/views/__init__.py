# src/pebbles/gui/views/__init__.py
"""NiceGUI views (render + setters) and their bus bindings."""

# Views
from pebbles.gui.views.error_banner_view import ErrorBannerView
from pebbles.gui.views.list_controls_view import ListControlsView
from pebbles.gui.views.pattern_table_view import PatternTableView
from pebbles.gui.views.progress_detail_view import ProgressDetailView
from pebbles.gui.views.progress_table_view import ProgressTableView
from pebbles.gui.views.refresh_bar_view import RefreshBarView
from pebbles.gui.views.stats_view import StatsView

# Bindings
from pebbles.gui.views.detail_bindings import DetailBindings
from pebbles.gui.views.list_bindings import ListBindings
from pebbles.gui.views.stats_bindings import StatsBindings
from pebbles.gui.views.sync_status_bindings import SyncStatusBindings

__all__ = [
    # Views
    "ErrorBannerView",
    "ListControlsView",
    "PatternTableView",
    "ProgressDetailView",
    "ProgressTableView",
    "RefreshBarView",
    "StatsView",
    # Bindings
    "DetailBindings",
    "ListBindings",
    "StatsBindings",
    "SyncStatusBindings",
]
