"""
Error taxonomy for a migration run.

Every fatal condition of a run is one of these exceptions. They are raised
by the infrastructure and application layers and only caught by the
interface layer, which turns them into a message and exit code 1.

Ambiguous configuration has no exception here: it is a warning, not an
error (see ``LocatedConfig.ambiguous``).
"""

from __future__ import annotations

from pathlib import Path


class TurbomigrateError(Exception):
    """Base class for all fatal run errors."""

    step: str = "run"

    def __init__(self, message: str, step: str | None = None):
        super().__init__(message)
        if step is not None:
            self.step = step


class ConfigNotFoundError(TurbomigrateError):
    """No candidate configuration file exists in the working directory."""

    step = "config"

    def __init__(self, kind: str, directory: Path, candidates: list[str]):
        self.kind = kind
        self.directory = directory
        self.candidates = list(candidates)
        super().__init__(
            f"No {kind} configuration file found in '{directory}'\n"
            f"Expected one of: {', '.join(self.candidates)}"
        )


class ParseFailureError(TurbomigrateError):
    """A configuration file could not be read, parsed or validated."""

    step = "config"

    def __init__(self, path: Path | str, cause: str):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Failed to parse config at {self.path}: {cause}")


class NoSelectableTargetError(TurbomigrateError):
    """Nothing left to choose from (no databases, no migrations folder)."""

    step = "target"


class UserCancelledError(TurbomigrateError):
    """The user declined or escaped an interactive prompt."""

    step = "prompt"

    def __init__(self, message: str = "Migration cancelled."):
        super().__init__(message)


class ExternalCommandFailedError(TurbomigrateError):
    """The generate or execute capability returned a failure."""

    step = "execute"

    def __init__(
        self,
        command: list[str],
        exit_code: int,
        stderr: str = "",
        step: str | None = None,
    ):
        self.command = list(command)
        self.exit_code = exit_code
        self.stderr = stderr
        message = f"Command failed with exit code {exit_code}: {' '.join(self.command)}"
        if stderr.strip():
            message += f"\n{stderr.strip()}"
        super().__init__(message, step=step)


class InvalidTransitionError(TurbomigrateError):
    """The orchestration state machine was asked for an illegal move."""

    step = "state"
