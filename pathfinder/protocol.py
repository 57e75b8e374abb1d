"""Startup configuration and inbound command parsing."""

import logging
import shlex
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from .errors import ConfigurationError, MissingPayloadError, PluginError, UnknownCommandError

logger = logging.getLogger(__name__)

# Scan without a depth limit.
UNBOUNDED_DEPTH = sys.maxsize

# Ask the crawler to look for Git repositories under the configured root. The
# optional payload is the maximum traversal depth.
COMMAND_SCAN_REPOSITORY_ROOT = "scan_repository_root"

# Ask to run external programs that print one candidate per line. The payload
# is a `:`-separated list of program paths.
COMMAND_RUN_EXTERNAL_PROGRAM = "run_external_program"


@dataclass
class PipeMessage:
    """An already-decoded message from the host."""

    name: str
    payload: Optional[str] = None


@dataclass
class ScanRepositoryRoot:
    max_depth: int = UNBOUNDED_DEPTH


@dataclass
class RunExternalProgram:
    programs: list[Path]


@dataclass
class CommandError:
    error: PluginError


Command = Union[ScanRepositoryRoot, RunExternalProgram, CommandError]


def parse_command(message: PipeMessage) -> Command:
    """Turn a host message into a typed command."""
    if message.name == COMMAND_SCAN_REPOSITORY_ROOT:
        return _parse_scan_repository_root_payload(message.name, message.payload)
    if message.name == COMMAND_RUN_EXTERNAL_PROGRAM:
        return _parse_run_external_program_payload(message.name, message.payload)
    return CommandError(UnknownCommandError(message.name))


def _parse_scan_repository_root_payload(name: str, payload: Optional[str]) -> Command:
    if payload is None:
        return ScanRepositoryRoot(max_depth=UNBOUNDED_DEPTH)

    if not (payload.isascii() and payload.isdigit()):
        return CommandError(ConfigurationError(f"{name}: invalid depth value: {payload}"))

    return ScanRepositoryRoot(max_depth=int(payload))


def _parse_run_external_program_payload(name: str, payload: Optional[str]) -> Command:
    if payload is None:
        return CommandError(MissingPayloadError(name))

    programs = [Path(part) for part in payload.split(":") if part]
    return RunExternalProgram(programs=programs)


# Configuration.

ROOT_OPTION = "root"
ON_SELECT_OPTION = "on_select"
STARTUP_MESSAGE_NAME = "startup_message_name"
STARTUP_MESSAGE_PAYLOAD = "startup_message_payload"


@dataclass
class SelectAction:
    """What to do with the selected path once the session ends.

    `command` is None to print the path, otherwise a command template where
    `{path}` is replaced by the selection (or the path is appended).
    """

    command: Optional[str] = None

    def argv(self, path: Path) -> Optional[list[str]]:
        if self.command is None:
            return None
        parts = shlex.split(self.command)
        if any("{path}" in part for part in parts):
            return [part.replace("{path}", str(path)) for part in parts]
        return parts + [str(path)]


def parse_select_action(value: Optional[str]) -> SelectAction:
    """Parse `print` or `exec:<command>`; anything else falls back to printing."""
    if not value:
        return SelectAction()

    scheme, sep, rest = value.partition(":")
    if scheme == "print" and not sep:
        return SelectAction()
    if scheme == "exec" and rest.strip():
        return SelectAction(command=rest.strip())

    logger.warning(f"Unknown {ON_SELECT_OPTION} value {value!r}, falling back to print")
    return SelectAction()


def synthesize_pipe_message(configuration: dict[str, str]) -> Optional[PipeMessage]:
    """Build the startup message, if the configuration names one."""
    name = configuration.get(STARTUP_MESSAGE_NAME)
    if not name:
        return None
    return PipeMessage(name=name, payload=configuration.get(STARTUP_MESSAGE_PAYLOAD))


@dataclass
class PathFinderConfig:
    root: Path = field(default_factory=Path.cwd)
    on_select: SelectAction = field(default_factory=SelectAction)

    # Dispatched once when the app mounts.
    pipe_message: Optional[PipeMessage] = None

    @classmethod
    def load(cls, configuration: dict[str, str]) -> "PathFinderConfig":
        root = configuration.get(ROOT_OPTION)
        pipe_message = synthesize_pipe_message(configuration)
        return cls(
            root=Path(root).expanduser() if root else Path.cwd(),
            on_select=parse_select_action(configuration.get(ON_SELECT_OPTION)),
            pipe_message=pipe_message,
        )
