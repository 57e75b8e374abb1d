"""Fuzzy subsequence matcher with skim-style scoring."""

import logging
from collections import OrderedDict
from typing import Iterable, Optional

from .models import Match, PathEntry

logger = logging.getLogger(__name__)

SCORE_MATCH = 16
PENALTY_GAP_START = 3
PENALTY_GAP_EXTENSION = 1
BONUS_BOUNDARY = 8
BONUS_CAMEL = 7
BONUS_CONSECUTIVE = 4
BONUS_FIRST_CHAR_MULTIPLIER = 2

DELIMITERS = frozenset("/\\-_. ")

DEFAULT_CACHE_SIZE = 8192

# (score, indices) or None when the query is not a subsequence.
Scored = Optional[tuple[int, list[int]]]


def _char_bonus(prev: Optional[str], ch: str) -> int:
    """Bonus for matching `ch` given the character before it."""
    if prev is None or prev in DELIMITERS:
        return BONUS_BOUNDARY if ch not in DELIMITERS else 0
    if prev.islower() and ch.isupper():
        return BONUS_CAMEL
    if prev.isalpha() and ch.isdigit():
        return BONUS_CAMEL
    return 0


def _is_subsequence(pattern: str, text: str) -> bool:
    it = iter(text)
    return all(ch in it for ch in pattern)


def fuzzy_indices(choice: str, pattern: str) -> Scored:
    """Score the best alignment of `pattern` as a subsequence of `choice`.

    Matching is case-insensitive unless the pattern has an uppercase letter.
    Returns the score and the strictly increasing indices of the matched
    characters in `choice`, or None when there is no match.
    """
    if not pattern:
        return 0, []

    if pattern.lower() == pattern:
        # Lower per character so indices stay aligned with `choice`.
        text = "".join(ch.lower() if len(ch.lower()) == 1 else ch for ch in choice)
    else:
        text = choice

    if not _is_subsequence(pattern, text):
        return None

    n = len(choice)
    bonuses = [_char_bonus(choice[j - 1] if j else None, choice[j]) for j in range(n)]

    prev_row: list[Optional[int]] = []
    back: list[list[int]] = []

    for i, pc in enumerate(pattern):
        row: list[Optional[int]] = [None] * n
        ptr = [-1] * n
        # Best predecessor at least one character back, with the gap penalty applied.
        gapped: Optional[int] = None
        gapped_from = -1

        for j in range(n):
            if i > 0:
                if gapped is not None:
                    gapped -= PENALTY_GAP_EXTENSION
                if j >= 2 and prev_row[j - 2] is not None:
                    candidate = prev_row[j - 2] - PENALTY_GAP_START
                    if gapped is None or candidate > gapped:
                        gapped, gapped_from = candidate, j - 2

            if text[j] != pc:
                continue

            bonus = bonuses[j] * (BONUS_FIRST_CHAR_MULTIPLIER if i == 0 else 1)
            if i == 0:
                row[j] = SCORE_MATCH + bonus
                continue

            best: Optional[int] = None
            source = -1
            if j >= 1 and prev_row[j - 1] is not None:
                best, source = prev_row[j - 1] + BONUS_CONSECUTIVE, j - 1
            if gapped is not None and (best is None or gapped > best):
                best, source = gapped, gapped_from
            if best is None:
                continue
            row[j] = best + SCORE_MATCH + bonus
            ptr[j] = source

        prev_row = row
        back.append(ptr)

    end = -1
    score: Optional[int] = None
    for j, value in enumerate(prev_row):
        if value is not None and (score is None or value > score):
            score, end = value, j

    if score is None:
        return None

    indices = [end]
    for i in range(len(pattern) - 1, 0, -1):
        end = back[i][end]
        indices.append(end)
    indices.reverse()
    return score, indices


class FuzzyMatcher:
    """Filters and ranks candidates against a query.

    Scores are memoized per (display, query) pair so that typing one more
    character only rescores candidates that have not been seen with that
    query yet.
    """

    def __init__(self, cache_size: int = DEFAULT_CACHE_SIZE):
        self._cache: OrderedDict[tuple[str, str], Scored] = OrderedDict()
        self._cache_size = cache_size

    def score(self, choice: str, query: str) -> Scored:
        key = (choice, query)
        if key in self._cache:
            self._cache.move_to_end(key)
            return self._cache[key]

        scored = fuzzy_indices(choice, query)
        self._cache[key] = scored
        if len(self._cache) > self._cache_size:
            self._cache.popitem(last=False)
        return scored

    def apply(self, query: str, choices: Iterable[PathEntry]) -> list[Match]:
        """Match every choice against `query`, best score first.

        Non-matching choices are dropped. Ties keep the iteration order of
        `choices`. An empty query matches everything with no highlights.
        """
        if not query:
            return [Match.of(choice, []) for choice in choices]

        ranked: list[tuple[int, Match]] = []
        for choice in choices:
            scored = self.score(choice.display, query)
            if scored is None:
                continue
            score, indices = scored
            ranked.append((score, Match.of(choice, list(indices))))

        ranked.sort(key=lambda item: item[0], reverse=True)
        logger.debug(f"Matched {len(ranked)} choices against {query!r}")
        return [match for _, match in ranked]

    def clear_cache(self):
        self._cache.clear()
