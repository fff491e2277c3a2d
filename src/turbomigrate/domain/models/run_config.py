"""
Run configuration domain model.

One immutable value built at startup from the command line and handed to
every component. Nothing reads CLI state from anywhere else.
"""

import sys
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .target import ExecutionMode

DEFAULT_RUNNER = "bunx"
DEFAULT_MODULE_RUNTIME = "bun"


def detect_interactive() -> bool:
    """True when both stdin and stdout are attached to a terminal."""
    return sys.stdin.isatty() and sys.stdout.isatty()


class RunConfig(BaseModel):
    """
    Settings for a single migration run.

    ``interactive`` is decided once, before anything executes, and controls
    whether external commands inherit the terminal or have output captured.
    """

    model_config = ConfigDict(frozen=True)

    workdir: Path = Field(..., description="Resolved project root")
    mode: Optional[ExecutionMode] = Field(None, description="Execution mode, None to ask")
    interactive: bool = Field(True, description="Terminal attached to stdin and stdout")
    runner: str = Field(DEFAULT_RUNNER, description="Package runner used for wrangler and drizzle-kit")
    module_runtime: str = Field(
        DEFAULT_MODULE_RUNTIME,
        description="JavaScript runtime used to evaluate script configs",
    )
    assume_no_generate: bool = Field(
        False,
        description="Skip the 'create a new migration?' question and answer no",
    )

    @field_validator("runner", "module_runtime")
    @classmethod
    def validate_command(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Command name cannot be empty")
        return v.strip()

    @classmethod
    def from_options(
        cls,
        directory: Optional[str],
        local: bool = False,
        remote: bool = False,
        interactive: Optional[bool] = None,
        **overrides,
    ) -> "RunConfig":
        """
        Build the run configuration from raw CLI options.

        Args:
            directory: ``--dir`` value, relative to the current directory
            local: ``--local`` flag
            remote: ``--remote`` flag
            interactive: Override TTY detection (tests, CI)
            **overrides: Remaining RunConfig fields

        Raises:
            ValueError: If both modes are requested
        """
        if local and remote:
            raise ValueError("--local and --remote are mutually exclusive")
        mode = ExecutionMode.LOCAL if local else ExecutionMode.REMOTE if remote else None
        workdir = (Path.cwd() / directory).resolve() if directory else Path.cwd().resolve()
        if interactive is None:
            interactive = detect_interactive()
        return cls(workdir=workdir, mode=mode, interactive=interactive, **overrides)
