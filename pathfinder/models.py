"""Candidate, match and redraw-signal models."""

import bisect
import weakref
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, Optional


class UpdateLoop(Enum):
    """Whether an operation changed visible state and the frame must be redrawn."""

    NOOP = 0
    MARK_DIRTY = 1

    @classmethod
    def from_bool(cls, changed: bool) -> "UpdateLoop":
        return cls.MARK_DIRTY if changed else cls.NOOP

    def __or__(self, other: "UpdateLoop") -> "UpdateLoop":
        if not isinstance(other, UpdateLoop):
            return NotImplemented
        return UpdateLoop.from_bool(self is UpdateLoop.MARK_DIRTY or other is UpdateLoop.MARK_DIRTY)

    def __bool__(self) -> bool:
        return self is UpdateLoop.MARK_DIRTY


@dataclass(frozen=True)
class PathEntry:
    """A candidate path, optionally shown under a different label."""

    path: Path
    repr: Optional[str] = None

    @classmethod
    def from_path(cls, path: "Path | str") -> "PathEntry":
        return cls(path=Path(path))

    @property
    def display(self) -> str:
        """Text the matcher runs against and the frame renders."""
        if self.repr is not None:
            return self.repr
        return str(self.path)

    @property
    def sort_key(self) -> tuple:
        # An entry without a label sorts before every labelled one.
        if self.repr is None:
            return (0, "", str(self.path))
        return (1, self.repr, str(self.path))


@dataclass
class Match:
    """A candidate that matched the current query."""

    indices: list[int]
    _choice: "weakref.ref[PathEntry]" = field(repr=False)

    @classmethod
    def of(cls, choice: PathEntry, indices: list[int]) -> "Match":
        return cls(indices=indices, _choice=weakref.ref(choice))

    @property
    def choice(self) -> Optional[PathEntry]:
        """The matched entry, or None once the store no longer holds it."""
        return self._choice()


class CandidateStore:
    """Deduplicated candidates kept in `PathEntry.sort_key` order.

    The store is the only strong owner of its entries; matches hold weak
    references that stop resolving once an entry is discarded.
    """

    def __init__(self, entries: Iterable[PathEntry] = ()):
        self._keys: list[tuple] = []
        self._entries: list[PathEntry] = []
        self.update(entries)

    def add(self, entry: PathEntry) -> bool:
        """Insert an entry, returning False if its key is already present."""
        key = entry.sort_key
        pos = bisect.bisect_left(self._keys, key)
        if pos < len(self._keys) and self._keys[pos] == key:
            return False
        self._keys.insert(pos, key)
        self._entries.insert(pos, entry)
        return True

    def update(self, entries: Iterable[PathEntry]) -> int:
        """Insert many entries, returning how many were new."""
        return sum(1 for entry in entries if self.add(entry))

    def discard(self, entry: PathEntry) -> bool:
        key = entry.sort_key
        pos = bisect.bisect_left(self._keys, key)
        if pos < len(self._keys) and self._keys[pos] == key:
            del self._keys[pos]
            del self._entries[pos]
            return True
        return False

    def __contains__(self, entry: object) -> bool:
        if not isinstance(entry, PathEntry):
            return False
        key = entry.sort_key
        pos = bisect.bisect_left(self._keys, key)
        return pos < len(self._keys) and self._keys[pos] == key

    def __iter__(self) -> Iterator[PathEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
