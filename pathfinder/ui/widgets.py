"""UI widgets for the PathFinder TUI."""

from textual.widgets import Static

from ..context import FuzzySearchContext
from .frame import Frame


class SearchFrame(Static):
    """Renders the search session as a single frame sized to the widget."""

    def __init__(self, context: FuzzySearchContext, id: str = None):
        super().__init__("", id=id, markup=False)
        self.context = context

    def on_mount(self) -> None:
        self.refresh_frame()

    def on_resize(self, event) -> None:
        """Re-layout when resized."""
        self.refresh_frame()

    def build_frame(self) -> Frame:
        size = self.content_size
        return Frame(rows=size.height, cols=size.width, context=self.context)

    def refresh_frame(self):
        """Repaint from the current session state."""
        self.update(self.build_frame().render())
