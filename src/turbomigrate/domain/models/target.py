"""
Migration target domain models.

``MigrationArtifact`` is one generated SQL file, ``ResolvedTarget`` is the
terminal product of target resolution that gets handed to the executor.
"""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .deployment_config import DatabaseBinding

MIGRATION_SUFFIX = ".sql"


class ExecutionMode(str, Enum):
    """Whether migrations hit the local dev instance or the live database."""

    LOCAL = "local"
    REMOTE = "remote"

    @property
    def flag(self) -> str:
        """Wrangler command-line flag for this mode."""
        return f"--{self.value}"


class MigrationArtifact(BaseModel):
    """A single generated migration file."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: Path
    modified_at: datetime

    @classmethod
    def from_path(cls, path: Path) -> "MigrationArtifact":
        """Build an artifact from a file on disk, reading its mtime."""
        stat = path.stat()
        return cls(
            name=path.name,
            path=path.resolve(),
            modified_at=datetime.fromtimestamp(stat.st_mtime),
        )

    @property
    def modified_label(self) -> str:
        return self.modified_at.strftime("%H:%M %Y-%m-%d")


class ResolvedTarget(BaseModel):
    """
    Fully resolved migration target.

    ``migration`` is None when there is nothing to apply.
    """

    model_config = ConfigDict(frozen=True)

    environment: Optional[str] = Field(None, description="Selected wrangler environment")
    database: DatabaseBinding
    migration: Optional[Path] = Field(None, description="Migration file to execute")
    mode: ExecutionMode

    @property
    def summary(self) -> str:
        scope = self.environment or "top-level"
        migration = self.migration.name if self.migration else "<none>"
        return f"{self.database.database_name} ({scope}, {self.mode.value}) <- {migration}"
