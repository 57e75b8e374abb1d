"""Candidate discovery: repository crawling and external listing programs."""

import logging
import os
import subprocess
from collections import deque
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

from ..errors import ExternalProgramError
from ..models import PathEntry
from ..protocol import UNBOUNDED_DEPTH

logger = logging.getLogger(__name__)

REPOSITORY_MARKER = ".git"
DEFAULT_BATCH_SIZE = 64
EXTERNAL_PROGRAM_TIMEOUT = 30


def is_repository(path: Path) -> bool:
    return (path / REPOSITORY_MARKER).exists()


def list_repositories(root: Path, max_depth: int = UNBOUNDED_DEPTH) -> Iterator[PathEntry]:
    """Yield every Git repository under `root`, breadth first.

    `max_depth` counts directory levels below `root` (0 only checks `root`
    itself). Repositories are not descended into and symlinks are not followed.
    """
    queue: deque[tuple[Path, int]] = deque([(root, 0)])

    while queue:
        directory, depth = queue.popleft()

        try:
            found = is_repository(directory)
        except OSError as e:
            logger.debug(f"Skipping unreadable directory {directory}: {e}")
            continue

        if found:
            yield PathEntry.from_path(directory)
            continue

        if depth >= max_depth:
            continue

        try:
            with os.scandir(directory) as it:
                children = sorted(
                    entry.path
                    for entry in it
                    if entry.name != REPOSITORY_MARKER and entry.is_dir(follow_symlinks=False)
                )
        except OSError as e:
            logger.debug(f"Skipping unreadable directory {directory}: {e}")
            continue

        for child in children:
            queue.append((Path(child), depth + 1))


def parse_program_line(line: str) -> Optional[PathEntry]:
    """Parse `path` or `label<TAB>path` into an entry."""
    line = line.rstrip("\r\n")
    if not line.strip():
        return None
    label, sep, path = line.partition("\t")
    if sep and path:
        return PathEntry(path=Path(path), repr=label)
    return PathEntry.from_path(line)


def run_external_program(program: Path, cwd: Optional[Path] = None) -> list[PathEntry]:
    """Run a listing program and parse its stdout into entries."""
    try:
        result = subprocess.run(
            [str(program)],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=EXTERNAL_PROGRAM_TIMEOUT,
            check=True,
        )
    except FileNotFoundError:
        raise ExternalProgramError(str(program), "program not found")
    except PermissionError:
        raise ExternalProgramError(str(program), "permission denied")
    except subprocess.TimeoutExpired:
        raise ExternalProgramError(str(program), f"timed out after {EXTERNAL_PROGRAM_TIMEOUT}s")
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip().splitlines()
        detail = stderr[-1] if stderr else f"exit status {e.returncode}"
        raise ExternalProgramError(str(program), detail)

    entries = []
    for line in result.stdout.splitlines():
        entry = parse_program_line(line)
        if entry:
            entries.append(entry)
    logger.info(f"{program} listed {len(entries)} paths")
    return entries


def batched(entries: Iterable[PathEntry], on_batch: Callable[[list[PathEntry]], None],
            batch_size: int = DEFAULT_BATCH_SIZE) -> int:
    """Deliver `entries` to `on_batch` in chunks, returning the total count."""
    batch: list[PathEntry] = []
    total = 0
    for entry in entries:
        batch.append(entry)
        if len(batch) >= batch_size:
            on_batch(batch)
            total += len(batch)
            batch = []
    if batch:
        on_batch(batch)
        total += len(batch)
    return total
