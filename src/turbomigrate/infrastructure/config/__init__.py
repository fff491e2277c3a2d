"""
Configuration infrastructure: locating, parsing and projecting config files.
"""

from .locator import (
    DEPLOYMENT_CONFIG_CANDIDATES,
    SCHEMA_TOOL_CONFIG_CANDIDATES,
    LocatedConfig,
    locate_config,
)
from .parsers import dump_document, parse_document, strip_jsonc
from .repository import ConfigRepository, LoadedConfig

__all__ = [
    "DEPLOYMENT_CONFIG_CANDIDATES",
    "SCHEMA_TOOL_CONFIG_CANDIDATES",
    "ConfigRepository",
    "LoadedConfig",
    "LocatedConfig",
    "dump_document",
    "locate_config",
    "parse_document",
    "strip_jsonc",
]
