"""Lays the search session out into a rows x cols character grid."""

from rich.text import Text

from ..context import FuzzySearchContext
from ..models import Match
from .styles import (
    COUNT_STYLE,
    CONTROL_KEY_STYLE,
    CONTROL_LABEL_STYLE,
    DIVIDER_STYLE,
    ERROR_STYLE,
    GONE_STYLE,
    HIGHLIGHT_STYLE,
    PROMPT_STYLE,
    QUERY_STYLE,
    SELECTED_MARKER_STYLE,
    SELECTED_STYLE,
    TOO_SMALL_STYLE,
    UNSELECTED_STYLE,
    ControlBar,
    ControlSegment,
)

PANE_TITLE = "Select a directory:"
SEARCH_PREFIX = ">"
SELECTED_MARKER = ">"
PANE_TOO_SMALL = "Pane too small"
GONE_LABEL = "(no longer available)"

# Always visible: user input and divider at the top, control bar and status
# line at the bottom.
CHROME_LINE_COUNT = 4

CONTROL_BAR = ControlBar(
    segments=(
        ControlSegment(control="↓↑", short_label="Navigate", full_label="Navigate between entries"),
        ControlSegment(control="ENTER", short_label="Select", full_label="Select entry"),
        ControlSegment(control="ESC", short_label="Clear/Quit", full_label="Clear input or quit"),
    )
)


def truncate(text: str, max_len: int) -> str:
    """Truncate text with ellipsis."""
    if len(text) <= max_len:
        return text
    if max_len <= 3:
        return text[:max_len]
    return text[:max_len - 3] + "..."


class Frame:
    """One frame of the search pane, built from read-only session state."""

    def __init__(self, rows: int, cols: int, context: FuzzySearchContext):
        self.rows = rows
        self.cols = cols
        self.context = context

    @property
    def result_rows(self) -> int:
        return max(0, self.rows - CHROME_LINE_COUNT)

    def render(self) -> Text:
        text = Text(no_wrap=True, overflow="crop")

        # Bail out if there is no room for the chrome plus one result.
        if self.rows < CHROME_LINE_COUNT + 1:
            text.append(truncate(PANE_TOO_SMALL, self.cols), style=TOO_SMALL_STYLE)
            return text

        # Header.
        self._render_user_input(text)
        self._render_divider(text)

        # Body.
        shown = self._render_matches(text)

        # Pad down to the footer.
        for _ in range(self.result_rows - shown):
            text.append("\n")

        # Footer.
        self._render_control_bar(text)
        self._render_status_bar(text)
        return text

    def _render_user_input(self, text: Text):
        text.append(f"{SEARCH_PREFIX} ", style=PROMPT_STYLE)
        query = self.context.user_input
        text.append(truncate(query, max(0, self.cols - 2)), style=QUERY_STYLE)
        text.append("\n")

    def _render_divider(self, text: Text):
        counts = f"{self.context.match_count}/{self.context.choice_count}"
        text.append(counts, style=COUNT_STYLE)
        fill = self.cols - len(counts) - 1
        if fill > 0:
            text.append(" " + "─" * fill, style=DIVIDER_STYLE)
        text.append("\n")

    def visible_window(self) -> tuple[int, list[Match]]:
        """Offset and slice of matches that fit, keeping the cursor visible."""
        matches = self.context.matches
        selected = self.context.selected_index
        start = max(0, selected - self.result_rows + 1)
        return start, matches[start:start + self.result_rows]

    def _render_matches(self, text: Text) -> int:
        start, window = self.visible_window()
        selected = self.context.selected_index
        width = max(0, self.cols - 2)

        for offset, match in enumerate(window):
            is_selected = start + offset == selected
            if is_selected:
                text.append(f"{SELECTED_MARKER} ", style=SELECTED_MARKER_STYLE)
            else:
                text.append("  ")

            choice = match.choice
            if choice is None:
                text.append(truncate(GONE_LABEL, width), style=GONE_STYLE)
                text.append("\n")
                continue

            label = truncate(choice.display, width)
            line = Text(label, style=SELECTED_STYLE if is_selected else UNSELECTED_STYLE)
            # Highlights past the ellipsis are dropped.
            visible = len(label) if label == choice.display else max(0, len(label) - 3)
            for index in match.indices:
                if index < visible:
                    line.stylize(HIGHLIGHT_STYLE, index, index + 1)
            text.append_text(line)
            text.append("\n")

        return len(window)

    def _render_control_bar(self, text: Text):
        full = CONTROL_BAR.width(full=True) <= self.cols
        for segment in CONTROL_BAR.segments:
            label = segment.full_label if full else segment.short_label
            text.append(f" {segment.control} ", style=CONTROL_KEY_STYLE)
            text.append(f" {label} ", style=CONTROL_LABEL_STYLE)
        text.append("\n")

    def _render_status_bar(self, text: Text):
        # Last line: no trailing newline.
        errors = self.context.errors
        if not errors:
            return
        message = str(errors[-1])
        if len(errors) > 1:
            message = f"({len(errors)}) {message}"
        text.append(truncate(message, self.cols), style=ERROR_STYLE)
