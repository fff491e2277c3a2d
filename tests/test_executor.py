"""
Tests for the external command layer.
"""

import subprocess
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from conftest import RecordingRunner
from turbomigrate.domain.errors import ExternalCommandFailedError
from turbomigrate.domain.models import DatabaseBinding, ExecutionMode, ResolvedTarget
from turbomigrate.infrastructure.executor import (
    COMMAND_NOT_FOUND,
    MigrationToolchain,
    SubprocessRunner,
    build_execute_command,
    build_generate_command,
)


def target(environment="prod", migration=Path("/p/drizzle/0001.sql"), mode=ExecutionMode.REMOTE):
    return ResolvedTarget(
        environment=environment,
        database=DatabaseBinding(binding="DB", database_name="app", database_id="abc"),
        migration=migration,
        mode=mode,
    )


class TestCommandBuilders:
    """Test cases for the wrangler and drizzle-kit command lines."""

    def test_execute_with_environment(self):
        assert build_execute_command(target(), "bunx") == [
            "bunx", "wrangler", "d1", "execute", "app", "--remote",
            "--env", "prod", "--file", "/p/drizzle/0001.sql",
        ]

    def test_execute_without_environment(self):
        assert build_execute_command(target(environment=None, mode=ExecutionMode.LOCAL), "npx") == [
            "npx", "wrangler", "d1", "execute", "app", "--local", "--file", "/p/drizzle/0001.sql",
        ]

    def test_execute_requires_migration(self):
        with pytest.raises(ValueError):
            build_execute_command(target(migration=None), "bunx")

    def test_generate(self):
        assert build_generate_command("bunx") == ["bunx", "drizzle-kit", "generate"]


class TestSubprocessRunner:
    """Test cases for SubprocessRunner."""

    def test_missing_binary(self, tmp_path):
        result = SubprocessRunner().run(["turbomigrate-no-such-binary-xyz"], tmp_path, interactive=False)
        assert result.exit_code == COMMAND_NOT_FOUND
        assert not result.success
        assert "command not found" in result.stderr

    @patch("turbomigrate.infrastructure.executor.subprocess.run")
    def test_captures_output_when_not_interactive(self, mock_run, tmp_path):
        mock_run.return_value = Mock(returncode=0, stdout="applied 3 commands\n", stderr="")

        result = SubprocessRunner().run(["bunx", "wrangler"], tmp_path, interactive=False)

        assert result.success
        assert result.stdout == "applied 3 commands\n"
        _, kwargs = mock_run.call_args
        assert kwargs["capture_output"] is True
        assert kwargs["cwd"] == str(tmp_path)
        assert kwargs["check"] is False
        assert kwargs["env"] is None

    @patch("turbomigrate.infrastructure.executor.subprocess.run")
    def test_inherits_terminal_when_interactive(self, mock_run, tmp_path):
        mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=2, stdout=None, stderr=None)

        result = SubprocessRunner(extra_env={"NO_COLOR": "1"}).run(["bunx"], tmp_path, interactive=True)

        assert result.exit_code == 2
        assert result.stdout == ""
        _, kwargs = mock_run.call_args
        assert kwargs["capture_output"] is False
        assert kwargs["env"]["NO_COLOR"] == "1"


class TestMigrationToolchain:
    """Test cases for MigrationToolchain."""

    def test_execute_runs_command_in_workdir(self, tmp_path):
        runner = RecordingRunner()
        toolchain = MigrationToolchain(runner, runner="bunx", interactive=True)

        result = toolchain.execute(target(), tmp_path)

        assert result.stdout == "ok"
        assert runner.calls == [(build_execute_command(target(), "bunx"), tmp_path, True)]

    def test_execute_failure(self, tmp_path):
        runner = RecordingRunner(exit_code=1, stderr="✘ [ERROR] no such table: users\n")
        toolchain = MigrationToolchain(runner, runner="bunx", interactive=False)

        with pytest.raises(ExternalCommandFailedError) as exc_info:
            toolchain.execute(target(), tmp_path)

        error = exc_info.value
        assert error.step == "execute"
        assert error.exit_code == 1
        assert error.command[:3] == ["bunx", "wrangler", "d1"]
        assert "no such table: users" in str(error)

    def test_generate_failure(self, tmp_path):
        toolchain = MigrationToolchain(RecordingRunner(exit_code=127), runner="bunx", interactive=False)

        with pytest.raises(ExternalCommandFailedError) as exc_info:
            toolchain.generate(tmp_path)

        assert exc_info.value.step == "generate"
        assert "exit code 127" in str(exc_info.value)
