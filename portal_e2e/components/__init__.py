"""Component objects for UI fragments shared across pages."""

from .header import HeaderComponent

__all__ = ["HeaderComponent"]
