"""PathFinder TUI application."""

import logging
from pathlib import Path
from typing import Optional

from textual import events, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Header
from textual.worker import get_current_worker

from .context import FuzzySearchContext
from .errors import ExternalProgramError, PluginError
from .models import PathEntry, UpdateLoop
from .protocol import (
    CommandError,
    PathFinderConfig,
    PipeMessage,
    RunExternalProgram,
    ScanRepositoryRoot,
    parse_command,
)
from .ui import APP_CSS, PANE_TITLE, SearchFrame
from .workers import batched, list_repositories, run_external_program

logger = logging.getLogger(__name__)


class PathFinderApp(App):
    """Fuzzy-find a directory among discovered repositories.

    Exits with the selected `Path` as the result, or None when cancelled.
    """

    CSS = APP_CSS

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", priority=True),
        Binding("up", "select_up", "Up", show=False, priority=True),
        Binding("down", "select_down", "Down", show=False, priority=True),
        Binding("enter", "select", "Select", priority=True),
        Binding("escape", "clear", "Clear/Quit", priority=True),
        Binding("backspace", "delete_char", "Delete", show=False, priority=True),
    ]

    def __init__(self, config: Optional[PathFinderConfig] = None):
        super().__init__()
        self.config = config or PathFinderConfig()
        self.context = FuzzySearchContext()
        self._pending_scans = 0

    def compose(self) -> ComposeResult:
        yield Header()
        yield SearchFrame(self.context, id="search-frame")

    def on_mount(self):
        self.title = PANE_TITLE
        self.sub_title = str(self.config.root)

        message = self.config.pipe_message or PipeMessage(name="scan_repository_root")
        self.handle_pipe_message(message)

    def handle_pipe_message(self, message: PipeMessage):
        """Parse a host message and start the work it asks for."""
        command = parse_command(message)
        logger.info(f"Dispatching {command}")

        if isinstance(command, ScanRepositoryRoot):
            self._start_scan()
            self._scan_repositories(self.config.root, command.max_depth)
        elif isinstance(command, RunExternalProgram):
            self._start_scan()
            self._run_external_programs(command.programs)
        elif isinstance(command, CommandError):
            self._redraw_if(self.context.log_error(command.error))

    # -- redraw --

    def _redraw_if(self, update: UpdateLoop):
        if update:
            self.query_one("#search-frame", SearchFrame).refresh_frame()

    # -- background discovery --

    def _start_scan(self):
        self._pending_scans += 1
        self.sub_title = f"{self.config.root} (scanning...)"

    def _finish_scan(self, found: int):
        self._pending_scans -= 1
        logger.info(f"Discovery finished with {found} paths")
        if self._pending_scans <= 0:
            self.sub_title = str(self.config.root)

    def _add_candidates(self, entries: list[PathEntry]):
        self._redraw_if(self.context.add_candidates(entries))

    def _report_error(self, error: PluginError):
        self._redraw_if(self.context.log_error(error))

    def _post_to_ui(self, callback, *args):
        """Run `callback` on the UI thread unless this worker was cancelled."""
        if not get_current_worker().is_cancelled:
            self.call_from_thread(callback, *args)

    @work(thread=True)
    def _scan_repositories(self, root: Path, max_depth: int):
        """Crawl `root` for repositories, streaming batches to the UI thread."""
        found = 0
        try:
            found = batched(
                list_repositories(root, max_depth),
                lambda batch: self._post_to_ui(self._add_candidates, batch),
            )
        except OSError as e:
            logger.warning(f"Scanning {root} failed: {e}")
            self._post_to_ui(self._report_error, PluginError(f"scan failed: {e}"))
        finally:
            self._post_to_ui(self._finish_scan, found)

    @work(thread=True)
    def _run_external_programs(self, programs: list[Path]):
        """Run each listing program and feed its output to the UI thread."""
        found = 0
        try:
            for program in programs:
                try:
                    entries = run_external_program(program, cwd=self.config.root)
                except ExternalProgramError as e:
                    logger.warning(f"External program failed: {e}")
                    self._post_to_ui(self._report_error, e)
                    continue
                found += batched(
                    entries,
                    lambda batch: self._post_to_ui(self._add_candidates, batch),
                )
        finally:
            self._post_to_ui(self._finish_scan, found)

    # -- input --

    def on_key(self, event: events.Key):
        """Append printable characters to the query."""
        if event.is_printable and event.character:
            event.stop()
            self._redraw_if(self.context.insert_char(event.character))

    def action_select_up(self):
        self._redraw_if(self.context.move_selection_up())

    def action_select_down(self):
        self._redraw_if(self.context.move_selection_down())

    def action_delete_char(self):
        self._redraw_if(self.context.delete_last_char())

    def action_clear(self):
        """Clear the query, or quit when it is already empty."""
        if not self.context.user_input:
            self.exit(None)
            return
        self._redraw_if(self.context.clear_query())

    def action_select(self):
        """Exit with the selected path."""
        entry = self.context.resolve_selection()
        if entry is None:
            # resolve_selection logged why.
            self._redraw_if(UpdateLoop.MARK_DIRTY)
            return
        logger.info(f"Selected {entry.path}")
        self.exit(entry.path)
