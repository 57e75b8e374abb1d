"""CSS and text styles for the PathFinder TUI."""

from dataclasses import dataclass

APP_CSS = """
Screen {
    layout: vertical;
}

#search-frame {
    height: 1fr;
    padding: 0 1;
}

Header {
    background: $surface;
}
"""

PROMPT_STYLE = "bold cyan"
QUERY_STYLE = "bold white"
DIVIDER_STYLE = "dim"
COUNT_STYLE = "yellow"
SELECTED_MARKER_STYLE = "bold green"
SELECTED_STYLE = "bold white"
UNSELECTED_STYLE = "white"
HIGHLIGHT_STYLE = "bold magenta"
GONE_STYLE = "dim italic"
CONTROL_KEY_STYLE = "bold white on blue"
CONTROL_LABEL_STYLE = "dim"
ERROR_STYLE = "bold red"
TOO_SMALL_STYLE = "bold red"


@dataclass(frozen=True)
class ControlSegment:
    control: str
    short_label: str
    full_label: str


@dataclass(frozen=True)
class ControlBar:
    segments: tuple[ControlSegment, ...]

    def width(self, full: bool) -> int:
        """Printed width of the bar, one space around each key and label."""
        total = 0
        for segment in self.segments:
            label = segment.full_label if full else segment.short_label
            total += len(segment.control) + len(label) + 4
        return total
