"""Fuzzy search session state."""

import logging
from typing import Iterable, Optional

from .errors import InternalError, PluginError, SelectionIndexOutOfBounds, UnexpectedError
from .matcher import FuzzyMatcher
from .models import CandidateStore, Match, PathEntry, UpdateLoop

logger = logging.getLogger(__name__)


class FuzzySearchContext:
    """Query, candidates, matches, selection cursor and non-fatal errors.

    Every mutating operation returns an `UpdateLoop` telling the render loop
    whether the frame needs repainting.

    Adding candidates while the query is empty does not rescore anything: the
    match list is only marked stale and is recomputed by the next read. A burst
    of discovered paths therefore costs one recompute, not one per path.
    """

    def __init__(self, matcher: Optional[FuzzyMatcher] = None):
        self._user_input: list[str] = []
        self._choices = CandidateStore()
        self._matches: list[Match] = []
        self._selected_index = 0
        self._errors: list[PluginError] = []
        self._matcher = matcher or FuzzyMatcher()
        self._stale = False

    # -- read accessors --

    @property
    def user_input(self) -> str:
        return "".join(self._user_input)

    @property
    def selected_index(self) -> int:
        self._refresh()
        return self._selected_index

    @property
    def choice_count(self) -> int:
        return len(self._choices)

    @property
    def match_count(self) -> int:
        self._refresh()
        return len(self._matches)

    @property
    def matches(self) -> list[Match]:
        self._refresh()
        return list(self._matches)

    @property
    def errors(self) -> list[PluginError]:
        return list(self._errors)

    # -- selection --

    def resolve_selection(self) -> Optional[PathEntry]:
        """Return the entry under the cursor, if any.

        An empty match list is logged as an internal error. A match whose entry
        is gone resolves to None.
        """
        self._refresh()
        if self._selected_index >= len(self._matches):
            self._log_internal_error(SelectionIndexOutOfBounds(self._selected_index))
            return None
        return self._matches[self._selected_index].choice

    def move_selection_up(self) -> UpdateLoop:
        update = self._clear_errors()
        self._refresh()
        previous_index = self._selected_index
        self._selected_index = self._clamp(self._selected_index - 1)
        return update | UpdateLoop.from_bool(previous_index != self._selected_index)

    def move_selection_down(self) -> UpdateLoop:
        update = self._clear_errors()
        self._refresh()
        previous_index = self._selected_index
        self._selected_index = self._clamp(self._selected_index + 1)
        return update | UpdateLoop.from_bool(previous_index != self._selected_index)

    # -- query editing --

    def insert_char(self, ch: str) -> UpdateLoop:
        self._clear_errors()
        self._user_input.append(ch)
        self._invalidate_matches()
        # Highlights change even when the result list does not.
        return UpdateLoop.MARK_DIRTY

    def delete_last_char(self) -> UpdateLoop:
        update = self._clear_errors()
        if not self._user_input:
            return update
        self._user_input.pop()
        self._invalidate_matches()
        return UpdateLoop.MARK_DIRTY

    def clear_query(self) -> UpdateLoop:
        update = self._clear_errors()
        if not self._user_input:
            return update
        self._user_input.clear()
        self._invalidate_matches()
        return UpdateLoop.MARK_DIRTY

    # -- candidates --

    def add_candidate(self, entry: PathEntry) -> UpdateLoop:
        return self.add_candidates([entry])

    def add_candidates(self, entries: Iterable[PathEntry]) -> UpdateLoop:
        added = self._choices.update(entries)
        if added:
            if self._user_input:
                self._invalidate_matches()
            else:
                self._stale = True
        return UpdateLoop.MARK_DIRTY

    # -- errors --

    def log_error(self, error: PluginError) -> UpdateLoop:
        logger.warning(f"Session error: {error}")
        self._errors.append(error)
        return UpdateLoop.MARK_DIRTY

    def clear_errors(self) -> UpdateLoop:
        self._errors.clear()
        return UpdateLoop.MARK_DIRTY

    def _clear_errors(self) -> UpdateLoop:
        had_errors = bool(self._errors)
        self._errors.clear()
        return UpdateLoop.from_bool(had_errors)

    def _log_internal_error(self, error: InternalError):
        logger.error(f"Internal error: {error}")
        self._errors.append(UnexpectedError(error))

    # -- recomputation --

    def _clamp(self, index: int) -> int:
        return max(0, min(index, len(self._matches) - 1))

    def _refresh(self):
        if self._stale:
            self._invalidate_matches()

    def _invalidate_matches(self):
        self._matches = self._matcher.apply(self.user_input, self._choices)
        self._selected_index = self._clamp(self._selected_index)
        self._stale = False
