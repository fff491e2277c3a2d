"""
Domain models package.

Typed views over parsed configuration documents and the values a run
produces.
"""

from .deployment_config import DatabaseBinding, DeploymentConfig, EnvironmentScope
from .run_config import RunConfig
from .schema_tool_config import DEFAULT_MIGRATIONS_DIR, SchemaToolConfig
from .target import MIGRATION_SUFFIX, ExecutionMode, MigrationArtifact, ResolvedTarget

__all__ = [
    "DEFAULT_MIGRATIONS_DIR",
    "MIGRATION_SUFFIX",
    "DatabaseBinding",
    "DeploymentConfig",
    "EnvironmentScope",
    "ExecutionMode",
    "MigrationArtifact",
    "ResolvedTarget",
    "RunConfig",
    "SchemaToolConfig",
]
