"""Non-fatal errors surfaced to the user through the status bar."""


class InternalError(Exception):
    """Inconsistency inside the session engine itself."""


class SelectionIndexOutOfBounds(InternalError):
    def __init__(self, index: int):
        super().__init__(f"selection index out of bounds: {index}")
        self.index = index


class PluginError(Exception):
    """Base class for every error the session log can hold."""

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class UnknownCommandError(PluginError):
    def __init__(self, name: str):
        super().__init__(f"unknown command: {name}")
        self.name = name


class MissingPayloadError(PluginError):
    def __init__(self, name: str):
        super().__init__(f"{name}: missing payload")
        self.name = name


class ConfigurationError(PluginError):
    def __init__(self, reason: str):
        super().__init__(f"configuration error: {reason}")
        self.reason = reason


class ExternalProgramError(PluginError):
    def __init__(self, program: str, reason: str):
        super().__init__(f"{program}: {reason}")
        self.program = program
        self.reason = reason


class UnexpectedError(PluginError):
    """Wraps an `InternalError` so it can be logged alongside user-facing errors."""

    def __init__(self, cause: InternalError):
        super().__init__(f"unexpected error: {cause}")
        self.cause = cause
