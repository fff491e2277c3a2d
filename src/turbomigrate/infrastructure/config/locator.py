"""
Config file locator.

Finds which of a fixed list of candidate filenames exist in a project
directory. Priority is the order of the candidate list, never the order the
filesystem happens to return.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence

from turbomigrate.domain.errors import ConfigNotFoundError

logger = logging.getLogger(__name__)

DEPLOYMENT_CONFIG_CANDIDATES = ["wrangler.toml", "wrangler.json", "wrangler.jsonc"]
SCHEMA_TOOL_CONFIG_CANDIDATES = [
    "drizzle.config.ts",
    "drizzle.config.js",
    "drizzle.config.mts",
    "drizzle.config.mjs",
]


@dataclass(frozen=True)
class LocatedConfig:
    """Result of a config lookup."""

    kind: str
    path: Path
    found: List[str] = field(default_factory=list)

    @property
    def ambiguous(self) -> bool:
        """More than one candidate existed; the first one was used."""
        return len(self.found) > 1


def find_candidates(workdir: Path, candidates: Sequence[str]) -> List[str]:
    """Return the candidates that exist as files in ``workdir``, in priority order."""
    return [name for name in candidates if (workdir / name).is_file()]


def locate_config(workdir: Path, candidates: Sequence[str], kind: str) -> LocatedConfig:
    """
    Locate one config file of a given kind.

    Args:
        workdir: Project directory to search
        candidates: Filenames in priority order
        kind: Human-readable config kind for messages ("wrangler", "drizzle")

    Returns:
        LocatedConfig for the highest-priority existing candidate

    Raises:
        ConfigNotFoundError: If none of the candidates exist
    """
    found = find_candidates(workdir, candidates)

    if not found:
        raise ConfigNotFoundError(kind, workdir, list(candidates))

    if len(found) > 1:
        logger.warning(
            "Multiple %s config files found: %s. Using: %s",
            kind,
            ", ".join(found),
            found[0],
        )

    located = LocatedConfig(kind=kind, path=workdir / found[0], found=found)
    logger.debug("Using %s config %s", kind, located.path)
    return located
