"""Page objects for the portal under test."""

from .dashboard_page import DashboardPage
from .login_page import LoginPage

__all__ = ["DashboardPage", "LoginPage"]
