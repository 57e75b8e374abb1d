"""UI components for PathFinder."""

from .frame import CONTROL_BAR, PANE_TITLE, Frame
from .styles import APP_CSS
from .widgets import SearchFrame

__all__ = [
    "CONTROL_BAR",
    "PANE_TITLE",
    "Frame",
    "SearchFrame",
    "APP_CSS",
]
