"""
External migration tooling.

Runs ``drizzle-kit generate`` and ``wrangler d1 execute`` through the
configured package runner (``bunx`` by default). In an interactive run the
child process inherits the terminal; otherwise its output is captured.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from turbomigrate.domain.errors import ExternalCommandFailedError
from turbomigrate.domain.models import ResolvedTarget

logger = logging.getLogger(__name__)

# Exit code used when the binary itself can't be started
COMMAND_NOT_FOUND = 127


@dataclass
class CommandResult:
    """Outcome of one external command."""

    command: list[str]
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class CommandRunner(Protocol):
    """Capability: run command ``args`` in ``cwd`` and report the result."""

    def run(self, args: list[str], cwd: Path, interactive: bool) -> CommandResult:
        ...


@dataclass
class SubprocessRunner:
    """CommandRunner backed by ``subprocess.run``."""

    extra_env: dict[str, str] = field(default_factory=dict)

    def run(self, args: list[str], cwd: Path, interactive: bool) -> CommandResult:
        logger.debug("Running %s in %s (interactive=%s)", " ".join(args), cwd, interactive)
        start = time.time()
        env = None
        if self.extra_env:
            env = {**os.environ, **self.extra_env}
        try:
            result = subprocess.run(
                args,
                cwd=str(cwd),
                env=env,
                capture_output=not interactive,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            logger.error("Command not found: %s", args[0])
            return CommandResult(
                command=list(args),
                exit_code=COMMAND_NOT_FOUND,
                stderr=f"{args[0]}: command not found ({e.strerror})",
            )

        duration_ms = int((time.time() - start) * 1000)
        logger.debug("Command exited with %s after %dms", result.returncode, duration_ms)
        return CommandResult(
            command=list(args),
            exit_code=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            duration_ms=duration_ms,
        )


def build_generate_command(runner: str) -> list[str]:
    """``<runner> drizzle-kit generate``"""
    return [runner, "drizzle-kit", "generate"]


def build_execute_command(target: ResolvedTarget, runner: str) -> list[str]:
    """
    Build the wrangler invocation for a resolved target.

    ``<runner> wrangler d1 execute <db> --local|--remote [--env <env>] --file <path>``

    Raises:
        ValueError: If the target has no migration file
    """
    if target.migration is None:
        raise ValueError("Resolved target has no migration file to execute")

    args = [runner, "wrangler", "d1", "execute", target.database.database_name, target.mode.flag]
    if target.environment:
        args += ["--env", target.environment]
    args += ["--file", str(target.migration)]
    return args


class MigrationToolchain:
    """The two external capabilities a run uses: generate and execute."""

    def __init__(self, command_runner: CommandRunner, runner: str, interactive: bool):
        self.command_runner = command_runner
        self.runner = runner
        self.interactive = interactive

    def _run(self, args: list[str], workdir: Path, step: str) -> CommandResult:
        result = self.command_runner.run(args, workdir, self.interactive)
        if not result.success:
            raise ExternalCommandFailedError(
                result.command, result.exit_code, result.stderr, step=step
            )
        return result

    def generate(self, workdir: Path) -> CommandResult:
        """
        Generate a new migration set with drizzle-kit.

        Raises:
            ExternalCommandFailedError: If drizzle-kit fails
        """
        logger.info("Generating migrations in %s", workdir)
        return self._run(build_generate_command(self.runner), workdir, step="generate")

    def execute(self, target: ResolvedTarget, workdir: Path) -> CommandResult:
        """
        Apply a migration file to the target database.

        Raises:
            ExternalCommandFailedError: If wrangler fails
        """
        args = build_execute_command(target, self.runner)
        logger.info("Executing migration: %s", " ".join(args))
        return self._run(args, workdir, step="execute")
