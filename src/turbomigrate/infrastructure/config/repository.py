"""
Configuration repository for a project directory.

Locates, parses and projects the two config files a run needs:

- wrangler config  -> DeploymentConfig
- drizzle config   -> SchemaToolConfig

Projection happens once, right after parsing, so nothing downstream reads
the raw document.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Generic, Type, TypeVar

from pydantic import BaseModel, ValidationError

from turbomigrate.domain.errors import ParseFailureError
from turbomigrate.domain.models import DeploymentConfig, SchemaToolConfig
from turbomigrate.domain.models.run_config import DEFAULT_MODULE_RUNTIME
from turbomigrate.infrastructure.config.locator import (
    DEPLOYMENT_CONFIG_CANDIDATES,
    SCHEMA_TOOL_CONFIG_CANDIDATES,
    LocatedConfig,
    locate_config,
)
from turbomigrate.infrastructure.config.parsers import parse_document

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class LoadedConfig(Generic[ModelT]):
    """A located file, its raw document and its typed view."""

    located: LocatedConfig
    document: Dict[str, Any]
    model: ModelT

    @property
    def path(self) -> Path:
        return self.located.path


def _format_validation_error(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "<root>"
        problems.append(f"{location}: {item['msg']}")
    return "; ".join(problems)


def project(document: Dict[str, Any], model: Type[ModelT], path: Path) -> ModelT:
    """
    Validate a raw document into its typed view.

    Raises:
        ParseFailureError: If the document doesn't fit the model
    """
    try:
        return model.model_validate(document)
    except ValidationError as e:
        raise ParseFailureError(path, f"Invalid configuration: {_format_validation_error(e)}") from e


class ConfigRepository:
    """
    Repository for the config files of one project.

    Handles locating, parsing and validating both config kinds.
    """

    def __init__(self, workdir: Path, module_runtime: str = DEFAULT_MODULE_RUNTIME):
        """
        Initialize the config repository.

        Args:
            workdir: Project root containing the config files
            module_runtime: JavaScript runtime used for script configs
        """
        self.workdir = workdir
        self.module_runtime = module_runtime

    async def _load(self, candidates, kind: str, model: Type[ModelT]) -> LoadedConfig[ModelT]:
        located = locate_config(self.workdir, candidates, kind)
        document = await parse_document(located.path, self.module_runtime)
        typed = project(document, model, located.path)
        logger.info("Loaded %s config from %s", kind, located.path)
        return LoadedConfig(located=located, document=document, model=typed)

    async def load_deployment_config(self) -> LoadedConfig[DeploymentConfig]:
        """
        Load the wrangler config.

        Raises:
            ConfigNotFoundError: If no wrangler config exists
            ParseFailureError: If it can't be parsed or validated
        """
        return await self._load(DEPLOYMENT_CONFIG_CANDIDATES, "wrangler", DeploymentConfig)

    async def load_schema_tool_config(self) -> LoadedConfig[SchemaToolConfig]:
        """
        Load the drizzle config.

        Raises:
            ConfigNotFoundError: If no drizzle config exists
            ParseFailureError: If it can't be imported or validated
        """
        return await self._load(SCHEMA_TOOL_CONFIG_CANDIDATES, "drizzle", SchemaToolConfig)
