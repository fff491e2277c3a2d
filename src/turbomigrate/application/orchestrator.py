"""
Migration run orchestrator.

Sequences one run through the state machine:

    RESOLVING_CONFIG -> RESOLVING_TARGET -> RESOLVING_MIGRATIONS -> EXECUTING -> DONE

Any fatal error moves the run to CANCELLED and is re-raised for the
interface layer to report. Nothing external runs before EXECUTING, except an
explicitly requested ``drizzle-kit generate``.
"""

from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass
from typing import Callable, ContextManager

from turbomigrate.application.migration_resolver import MigrationResolver, MigrationSelection
from turbomigrate.application.target_resolver import TargetResolver, TargetSelection
from turbomigrate.domain.errors import TurbomigrateError
from turbomigrate.domain.models import (
    DeploymentConfig,
    ExecutionMode,
    ResolvedTarget,
    RunConfig,
    SchemaToolConfig,
)
from turbomigrate.domain.prompts import MenuOption, Prompter, unwrap_choice
from turbomigrate.domain.state_machine import RunState, RunStateMachine
from turbomigrate.infrastructure.config.repository import ConfigRepository, LoadedConfig
from turbomigrate.infrastructure.executor import CommandResult, MigrationToolchain

logger = logging.getLogger(__name__)

Spinner = Callable[[str], ContextManager]


def _no_spinner(message: str) -> ContextManager:
    return contextlib.nullcontext()


@dataclass(frozen=True)
class RunOutcome:
    """What a finished run did."""

    target: ResolvedTarget
    result: CommandResult | None
    states: tuple[RunState, ...]

    @property
    def executed(self) -> bool:
        return self.result is not None


@dataclass(frozen=True)
class ResolvedConfigs:
    deployment: LoadedConfig[DeploymentConfig]
    schema_tool: LoadedConfig[SchemaToolConfig]


class MigrationOrchestrator:
    """Runs the resolution pipeline for one RunConfig."""

    def __init__(
        self,
        run_config: RunConfig,
        prompter: Prompter,
        toolchain: MigrationToolchain,
        repository: ConfigRepository | None = None,
        notify: Callable[[str], None] | None = None,
        spinner: Spinner | None = None,
    ):
        self.run_config = run_config
        self.prompter = prompter
        self.toolchain = toolchain
        self.repository = repository or ConfigRepository(
            run_config.workdir, run_config.module_runtime
        )
        self.notify = notify or (lambda message: None)
        self.spinner = spinner or _no_spinner
        self.target_resolver = TargetResolver(prompter)
        self.migration_resolver = MigrationResolver(
            prompter,
            toolchain,
            assume_no_generate=run_config.assume_no_generate,
            notify=self.notify,
        )
        self.machine = RunStateMachine()

    async def run(self) -> RunOutcome:
        """
        Resolve everything and execute the selected migration.

        Raises:
            TurbomigrateError: Any fatal condition; the run ends CANCELLED
        """
        try:
            mode = self.resolve_mode()
            configs = await self.load_configs()

            self.machine.advance(RunState.RESOLVING_TARGET)
            selection = self.target_resolver.resolve(configs.deployment.model)

            self.machine.advance(RunState.RESOLVING_MIGRATIONS)
            migrations = self.migration_resolver.resolve(
                self.run_config.workdir, configs.schema_tool.model
            )

            target = build_target(selection, migrations, mode)
            self.machine.advance(RunState.EXECUTING)
            result = self.execute(target)

            self.machine.advance(RunState.DONE)
        except TurbomigrateError as e:
            self.machine.cancel(str(e))
            logger.debug("Run cancelled in state %s: %s", self.machine.history[-2].value, e)
            raise

        return RunOutcome(target=target, result=result, states=tuple(self.machine.history))

    def resolve_mode(self) -> ExecutionMode:
        """Use the --local/--remote flag, or ask."""
        if self.run_config.mode is not None:
            return self.run_config.mode

        options = [MenuOption(label=mode.value, value=mode) for mode in ExecutionMode]
        index = unwrap_choice(
            self.prompter.select("Want to migrate locally or remotely?", options, default_index=0)
        )
        return options[index].value

    async def load_configs(self) -> ResolvedConfigs:
        deployment = await self.repository.load_deployment_config()
        schema_tool = await self.repository.load_schema_tool_config()
        return ResolvedConfigs(deployment=deployment, schema_tool=schema_tool)

    def execute(self, target: ResolvedTarget) -> CommandResult | None:
        if target.migration is None:
            logger.warning("No migration selected, nothing to execute")
            self.notify("No SQL migration files found in the migrations folder, nothing to apply.")
            return None

        with self.spinner("Starting migration"):
            return self.toolchain.execute(target, self.run_config.workdir)


def build_target(
    selection: TargetSelection,
    migrations: MigrationSelection,
    mode: ExecutionMode,
) -> ResolvedTarget:
    return ResolvedTarget(
        environment=selection.environment,
        database=selection.database,
        migration=migrations.path,
        mode=mode,
    )
