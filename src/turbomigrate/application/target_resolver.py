"""
Target resolver - pick the environment and database to migrate.

Singleton choices are made automatically; anything larger goes through the
prompter. Cancelling either prompt aborts the run.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from turbomigrate.domain.errors import NoSelectableTargetError
from turbomigrate.domain.models import DatabaseBinding, DeploymentConfig
from turbomigrate.domain.prompts import MenuOption, Prompter, unwrap_choice

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TargetSelection:
    """Environment (None for top-level scope) and database binding."""

    environment: Optional[str]
    database: DatabaseBinding


def binding_for_choice(bindings: List[DatabaseBinding], index: int) -> DatabaseBinding:
    """
    Map a chosen menu position back to a binding.

    The chosen entry's identifier is matched against all bindings; when the
    entry has no identifier its position is used instead.
    """
    chosen_id = bindings[index].database_id
    if chosen_id:
        for binding in bindings:
            if binding.database_id == chosen_id:
                return binding
    return bindings[index]


class TargetResolver:
    """Resolves a deployment config to a single environment and database."""

    def __init__(self, prompter: Prompter):
        self.prompter = prompter

    def resolve(self, deployment: DeploymentConfig) -> TargetSelection:
        """
        Resolve environment, then database.

        Raises:
            UserCancelledError: If a prompt is cancelled
            NoSelectableTargetError: If the chosen scope has no databases
        """
        environment = self.resolve_environment(deployment)
        database = self.resolve_database(deployment, environment)
        logger.info(
            "Resolved target: environment=%s database=%s",
            environment or "<top-level>",
            database.database_name,
        )
        return TargetSelection(environment=environment, database=database)

    def resolve_environment(self, deployment: DeploymentConfig) -> Optional[str]:
        environments = deployment.environments

        if not environments:
            logger.debug("No environments declared, using top-level scope")
            return None

        if len(environments) == 1:
            logger.debug("Single environment '%s' selected automatically", environments[0])
            return environments[0]

        options = [MenuOption(label=name, value=name) for name in environments]
        index = unwrap_choice(
            self.prompter.select("Select an environment:", options, default_index=0)
        )
        return environments[index]

    def resolve_database(
        self,
        deployment: DeploymentConfig,
        environment: Optional[str],
    ) -> DatabaseBinding:
        bindings = deployment.bindings_for(environment)

        if not bindings:
            scope = f"environment '{environment}'" if environment else "the top-level config"
            raise NoSelectableTargetError(
                f"No cloudflare d1 databases found/configured in {scope}."
            )

        if len(bindings) == 1:
            logger.debug("Single database '%s' selected automatically", bindings[0].database_name)
            return bindings[0]

        options = [
            MenuOption(label=binding.label, value=binding.database_id, hint=binding.binding)
            for binding in bindings
        ]
        index = unwrap_choice(
            self.prompter.select("Select a database to migrate to:", options, default_index=0)
        )
        return binding_for_choice(bindings, index)
