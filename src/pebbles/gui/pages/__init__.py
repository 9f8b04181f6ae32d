"""Pages: one class per route."""

from pebbles.gui.pages.base_page import BasePage
from pebbles.gui.pages.dashboard_page import DashboardPage
from pebbles.gui.pages.login_page import LoginPage
from pebbles.gui.pages.progress_detail_page import ProgressDetailPage
from pebbles.gui.pages.progress_list_page import ProgressListPage

__all__ = [
    "BasePage",
    "DashboardPage",
    "LoginPage",
    "ProgressDetailPage",
    "ProgressListPage",
]
