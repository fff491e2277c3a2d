"""
Migration set resolver.

Optionally generates a fresh migration set, then lists the ``.sql`` files of
the migrations folder newest-first and resolves one of them.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from turbomigrate.domain.errors import NoSelectableTargetError
from turbomigrate.domain.models import MIGRATION_SUFFIX, MigrationArtifact, SchemaToolConfig
from turbomigrate.domain.prompts import MenuOption, Prompter, unwrap_choice
from turbomigrate.infrastructure.executor import MigrationToolchain

logger = logging.getLogger(__name__)

NEWEST_MARKER = "NEWEST"

# Called with a status message before and after a generate step
Notifier = Callable[[str], None]


@dataclass(frozen=True)
class MigrationSelection:
    """Chosen artifact (None when the folder had no migrations)."""

    artifact: Optional[MigrationArtifact]
    candidates: List[MigrationArtifact] = field(default_factory=list)
    generated: bool = False

    @property
    def path(self) -> Optional[Path]:
        return self.artifact.path if self.artifact else None


def list_migrations(directory: Path) -> List[MigrationArtifact]:
    """
    List migration artifacts of ``directory``, newest first.

    Ties keep name order (stable sort over a name-sorted listing).

    Raises:
        NoSelectableTargetError: If the folder or one of its files can't be read
    """
    try:
        files = sorted(
            (entry for entry in directory.iterdir()
             if entry.is_file() and entry.name.endswith(MIGRATION_SUFFIX)),
            key=lambda entry: entry.name,
        )
        artifacts = [MigrationArtifact.from_path(entry) for entry in files]
    except OSError as e:
        raise NoSelectableTargetError(
            f"Cannot read migrations folder '{directory}': {e.strerror or e}"
        ) from e
    return sorted(artifacts, key=lambda artifact: artifact.modified_at, reverse=True)


def migration_label(artifact: MigrationArtifact, newest: bool) -> str:
    marker = f"{NEWEST_MARKER} " if newest else ""
    return f"{marker}{artifact.name}  {artifact.modified_label}"


class MigrationResolver:
    """Resolves the migrations folder of a project to one artifact."""

    def __init__(
        self,
        prompter: Prompter,
        toolchain: MigrationToolchain,
        assume_no_generate: bool = False,
        notify: Optional[Notifier] = None,
    ):
        self.prompter = prompter
        self.toolchain = toolchain
        self.assume_no_generate = assume_no_generate
        self.notify = notify or (lambda message: None)

    def resolve(self, workdir: Path, schema_config: SchemaToolConfig) -> MigrationSelection:
        """
        Resolve the migration to execute.

        Raises:
            UserCancelledError: If a prompt is cancelled
            ExternalCommandFailedError: If generating migrations fails
            NoSelectableTargetError: If the migrations folder doesn't exist
        """
        directory = workdir / schema_config.out
        generated = self._maybe_generate(workdir, directory)

        if not directory.is_dir():
            raise NoSelectableTargetError(
                f"Migration cancelled: Was not able to locate migrations folder '{directory}'"
            )

        artifacts = list_migrations(directory)
        if not artifacts:
            logger.warning("No SQL migration files found in %s", directory)
            return MigrationSelection(artifact=None, generated=generated)

        artifact = self._choose(artifacts)
        logger.info("Selected migration %s", artifact.path)
        return MigrationSelection(artifact=artifact, candidates=artifacts, generated=generated)

    def _maybe_generate(self, workdir: Path, directory: Path) -> bool:
        if self.assume_no_generate:
            logger.debug("Skipping migration generation")
            return False

        message = "Want to create a new migration?"
        if not directory.is_dir():
            message += " (Currently we can't locate any migrations)"

        if not unwrap_choice(self.prompter.confirm(message, default=False)):
            return False

        self.notify("Running drizzle-kit generate...")
        self.toolchain.generate(workdir)
        self.notify("New migration created")
        return True

    def _choose(self, artifacts: List[MigrationArtifact]) -> MigrationArtifact:
        if len(artifacts) == 1:
            logger.debug("Single migration '%s' selected automatically", artifacts[0].name)
            return artifacts[0]

        options = [
            MenuOption(label=migration_label(artifact, index == 0), value=artifact.path)
            for index, artifact in enumerate(artifacts)
        ]
        index = unwrap_choice(
            self.prompter.select("Select a migration:", options, default_index=0)
        )
        return artifacts[index]
