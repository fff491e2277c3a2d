"""
Shared fixtures and fakes for the turbomigrate test-suite.

The fakes stand in for the two interactive/external capabilities of a run:
``ScriptedPrompter`` answers prompts from a script, ``RecordingRunner``
records external commands instead of spawning them.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import pytest

from turbomigrate.domain.results import Cancelled, Failure, Success
from turbomigrate.infrastructure.config.parsers import ModuleParser
from turbomigrate.infrastructure.executor import CommandResult

CANCEL = object()


@dataclass
class PromptCall:
    kind: str
    message: str
    labels: list[str] = field(default_factory=list)
    values: list[Any] = field(default_factory=list)
    default: Any = None


class ScriptedPrompter:
    """Prompter that replays scripted answers and records every question."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.calls: list[PromptCall] = []

    def _next(self, message: str):
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {message}")
        answer = self.answers.pop(0)
        if answer is CANCEL:
            return Failure(Cancelled(message))
        return Success(answer)

    def select(self, message, options, default_index=None):
        self.calls.append(PromptCall(
            kind="select",
            message=message,
            labels=[option.label for option in options],
            values=[option.value for option in options],
            default=default_index,
        ))
        return self._next(message)

    def confirm(self, message, default=False):
        self.calls.append(PromptCall(kind="confirm", message=message, default=default))
        return self._next(message)

    def selects(self) -> list[PromptCall]:
        return [call for call in self.calls if call.kind == "select"]


class RecordingRunner:
    """CommandRunner that records invocations and returns canned results."""

    def __init__(self, exit_code: int = 0, stderr: str = "", on_run: Callable | None = None):
        self.exit_code = exit_code
        self.stderr = stderr
        self.on_run = on_run
        self.calls: list[tuple[list[str], Path, bool]] = []

    def run(self, args, cwd, interactive):
        self.calls.append((list(args), Path(cwd), interactive))
        if self.on_run is not None:
            self.on_run(list(args), Path(cwd))
        return CommandResult(
            command=list(args),
            exit_code=self.exit_code,
            stdout="ok" if self.exit_code == 0 else "",
            stderr=self.stderr,
        )


def write_migration(directory: Path, name: str, mtime: float) -> Path:
    """Create an (empty) migration file with a fixed modification time."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text("-- migration\n", encoding="utf-8")
    os.utime(path, (mtime, mtime))
    return path


def write_json(path: Path, data: dict) -> Path:
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


def write_drizzle_ts(directory: Path, config: dict | None = None, name: str = "drizzle.config.ts") -> Path:
    """A drizzle config module whose default export is a JSON literal."""
    if config is None:
        config = {"out": "drizzle", "schema": "./src/schema.ts", "dialect": "sqlite"}
    path = directory / name
    path.write_text(
        'import { defineConfig } from "drizzle-kit";\n\n'
        f"export default {json.dumps(config)};\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def fake_js_runtime(monkeypatch):
    """
    Replace the JS runtime subprocess with an in-process reader.

    The fake understands the ``export default <json>;`` modules written by
    ``write_drizzle_ts`` and records which files were evaluated.
    """
    evaluated: list[Path] = []

    async def fake_import(self, path):
        evaluated.append(path)
        source = path.read_text(encoding="utf-8")
        payload = source.split("export default", 1)[1].strip().rstrip(";")
        return json.loads(payload)

    monkeypatch.setattr(ModuleParser, "_import_js_module", fake_import)
    return evaluated


@pytest.fixture
def prod_project(tmp_path: Path, fake_js_runtime) -> Path:
    """Project with one 'prod' environment, one binding and one migration."""
    project = tmp_path / "proj"
    project.mkdir()
    (project / "wrangler.toml").write_text(
        'name = "app-worker"\n'
        'main = "src/index.ts"\n'
        "\n"
        "[env.prod]\n"
        "\n"
        "[[env.prod.d1_databases]]\n"
        'binding = "DB"\n'
        'database_name = "app"\n'
        'database_id = "abc123"\n',
        encoding="utf-8",
    )
    write_drizzle_ts(project)
    write_migration(project / "drizzle", "0000_init.sql", 1_700_000_000)
    return project
