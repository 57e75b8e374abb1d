"""Tests for the fuzzy search session."""

import random

import pytest

from pathfinder.context import FuzzySearchContext
from pathfinder.errors import ConfigurationError, SelectionIndexOutOfBounds, UnexpectedError
from pathfinder.matcher import FuzzyMatcher
from pathfinder.models import PathEntry, UpdateLoop


class CountingMatcher(FuzzyMatcher):
    def __init__(self):
        super().__init__()
        self.calls = 0

    def apply(self, query, choices):
        self.calls += 1
        return super().apply(query, choices)


def entries(*names: str) -> list[PathEntry]:
    return [PathEntry.from_path(name) for name in names]


def assert_invariants(context: FuzzySearchContext):
    assert 0 <= context.selected_index < max(1, context.match_count)
    assert context.match_count <= context.choice_count


@pytest.fixture
def context():
    ctx = FuzzySearchContext()
    ctx.add_candidates(entries("abc", "xyz", "bca"))
    return ctx


class TestQueryEditing:
    """Tests for typing, deleting and clearing the query."""

    def test_scenario_typing_filters(self, context):
        """Typing `ab` keeps only candidates with `a` then `b`."""
        assert context.insert_char("a") is UpdateLoop.MARK_DIRTY
        assert context.insert_char("b") is UpdateLoop.MARK_DIRTY

        displays = [m.choice.display for m in context.matches]
        assert "abc" in displays
        assert "xyz" not in displays
        assert "bca" not in displays
        assert context.user_input == "ab"

    def test_insert_always_redraws(self, context):
        """Typing redraws even when the result list is unchanged."""
        context.insert_char("q")
        assert context.match_count == 0
        assert context.insert_char("q") is UpdateLoop.MARK_DIRTY

    def test_delete_last_char(self, context):
        """Deleting widens the results again."""
        context.insert_char("a")
        context.insert_char("b")
        assert context.delete_last_char() is UpdateLoop.MARK_DIRTY
        assert context.user_input == "a"
        assert context.match_count == 2

    def test_delete_on_empty_query_is_noop(self, context):
        """Nothing to delete and no errors means no redraw."""
        assert context.delete_last_char() is UpdateLoop.NOOP
        assert context.user_input == ""

    def test_clear_query(self, context):
        """Clearing restores every candidate."""
        context.insert_char("x")
        assert context.clear_query() is UpdateLoop.MARK_DIRTY
        assert context.user_input == ""
        assert context.match_count == 3

    def test_clear_empty_query_is_noop(self, context):
        """Clearing an empty query changes nothing."""
        assert context.clear_query() is UpdateLoop.NOOP

    def test_clear_empty_query_with_errors_redraws(self, context):
        """Dropping errors is a visible change."""
        context.log_error(ConfigurationError("bad"))
        assert context.clear_query() is UpdateLoop.MARK_DIRTY
        assert context.errors == []


class TestSelection:
    """Tests for the selection cursor."""

    def test_scenario_move_down_clamps(self, context):
        """At the last match, moving down stays put."""
        context.move_selection_down()
        context.move_selection_down()
        assert context.selected_index == 2

        assert context.move_selection_down() is UpdateLoop.NOOP
        assert context.selected_index == 2

    def test_move_up_clamps_at_zero(self, context):
        """Moving up from the top stays at zero."""
        assert context.move_selection_up() is UpdateLoop.NOOP
        assert context.selected_index == 0

    def test_move_redraws_when_cursor_moves(self, context):
        """A cursor change requests a redraw."""
        assert context.move_selection_down() is UpdateLoop.MARK_DIRTY
        assert context.move_selection_up() is UpdateLoop.MARK_DIRTY

    def test_cursor_clamped_when_results_shrink(self, context):
        """Narrowing the results pulls the cursor back into range."""
        context.move_selection_down()
        context.move_selection_down()
        context.insert_char("a")
        context.insert_char("b")
        assert context.match_count == 1
        assert context.selected_index == 0

    def test_resolve_selection(self, context):
        """The cursor resolves to its entry."""
        context.move_selection_down()
        entry = context.resolve_selection()
        assert entry is context.matches[1].choice
        assert context.errors == []

    def test_scenario_no_match_logs_out_of_range(self):
        """With nothing matching, resolving logs an error and returns None."""
        context = FuzzySearchContext()
        for name in ("a", "b", "c", "d", "e"):
            context.add_candidate(PathEntry.from_path(name))

        context.insert_char("z")

        assert context.match_count == 0
        assert context.selected_index == 0
        assert context.resolve_selection() is None
        assert context.errors == [UnexpectedError(SelectionIndexOutOfBounds(0))]

    def test_resolve_evicted_entry_is_none(self, context):
        """A match whose entry left the store resolves to None, not an error."""
        matches = context.matches
        context._choices.discard(PathEntry.from_path("abc"))
        context._matches = matches

        assert context.resolve_selection() is None
        assert context.errors == []


class TestCandidates:
    """Tests for adding candidates."""

    def test_duplicate_insert_keeps_count(self, context):
        """The same label and path twice counts once."""
        assert context.add_candidate(PathEntry.from_path("abc")) is UpdateLoop.MARK_DIRTY
        assert context.choice_count == 3

    def test_empty_query_lists_every_candidate(self, context):
        """With no filter every candidate is a match."""
        context.add_candidate(PathEntry.from_path("new"))
        assert context.match_count == context.choice_count == 4
        assert [m.indices for m in context.matches] == [[], [], [], []]

    def test_empty_query_defers_rescoring(self):
        """A burst of candidates with no query costs one recompute on read."""
        matcher = CountingMatcher()
        context = FuzzySearchContext(matcher=matcher)
        for i in range(100):
            context.add_candidate(PathEntry.from_path(f"/repo/{i}"))
        assert matcher.calls == 0

        assert context.match_count == 100
        assert matcher.calls == 1
        assert context.match_count == 100
        assert matcher.calls == 1

    def test_non_empty_query_rescoring_is_eager(self):
        """With a query, new candidates are matched on arrival."""
        matcher = CountingMatcher()
        context = FuzzySearchContext(matcher=matcher)
        context.insert_char("r")
        calls = matcher.calls
        context.add_candidate(PathEntry.from_path("/repo"))
        assert matcher.calls == calls + 1
        assert context.match_count == 1

    def test_late_candidate_filtered_by_query(self, context):
        """A candidate arriving after the query is filtered immediately."""
        context.insert_char("q")
        context.add_candidate(PathEntry.from_path("nope"))
        assert context.match_count == 0
        context.add_candidate(PathEntry.from_path("quux"))
        assert [m.choice.display for m in context.matches] == ["quux"]

    def test_selection_survives_burst_after_navigation(self, context):
        """Stale results are refreshed before navigation reads them."""
        context.move_selection_down()
        context.add_candidates(entries("aaa", "aab"))
        assert context.move_selection_down() is UpdateLoop.MARK_DIRTY
        assert context.selected_index == 2
        assert context.match_count == 5


class TestErrors:
    """Tests for the transient error log."""

    def test_log_and_clear(self, context):
        """Errors accumulate until cleared."""
        assert context.log_error(ConfigurationError("one")) is UpdateLoop.MARK_DIRTY
        context.log_error(ConfigurationError("two"))
        assert len(context.errors) == 2
        assert context.clear_errors() is UpdateLoop.MARK_DIRTY
        assert context.errors == []

    def test_scenario_typing_clears_errors(self, context):
        """Editing the query drops earlier errors."""
        context.log_error(ConfigurationError("E1"))
        context.insert_char("x")
        assert ConfigurationError("E1") not in context.errors
        assert context.errors == []

    @pytest.mark.parametrize(
        "operation",
        ["delete_last_char", "clear_query", "move_selection_up", "move_selection_down"],
    )
    def test_navigation_and_edits_clear_errors(self, context, operation):
        """Every query or navigation action clears the whole log."""
        context.log_error(ConfigurationError("E1"))
        context.log_error(ConfigurationError("E2"))
        assert getattr(context, operation)() is UpdateLoop.MARK_DIRTY
        assert context.errors == []

    def test_adding_candidates_keeps_errors(self, context):
        """Discovery does not clear the log."""
        context.log_error(ConfigurationError("E1"))
        context.add_candidate(PathEntry.from_path("new"))
        assert context.errors == [ConfigurationError("E1")]


class TestInvariants:
    """Randomized operation sequences keep the session consistent."""

    @pytest.mark.parametrize("seed", range(5))
    def test_random_operations(self, seed):
        """The cursor stays in range and matches never outnumber candidates."""
        rng = random.Random(seed)
        context = FuzzySearchContext()
        words = ["src", "lib", "api", "web", "docs", "nix-config", "dotfiles"]

        for _ in range(300):
            op = rng.choice(["char", "delete", "clear", "up", "down", "add", "resolve"])
            if op == "char":
                context.insert_char(rng.choice("abcdeilnorstw-/"))
            elif op == "delete":
                context.delete_last_char()
            elif op == "clear":
                context.clear_query()
            elif op == "up":
                context.move_selection_up()
            elif op == "down":
                context.move_selection_down()
            elif op == "add":
                context.add_candidate(PathEntry.from_path(f"/{rng.choice(words)}/{rng.choice(words)}"))
            else:
                context.resolve_selection()
            assert_invariants(context)

        if not context.user_input:
            assert context.match_count == context.choice_count
