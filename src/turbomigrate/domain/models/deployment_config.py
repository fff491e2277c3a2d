"""
Deployment (wrangler) configuration domain model.

Typed projection of a parsed wrangler document. Only the fields a migration
run needs are declared; everything else is kept as extra data.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DatabaseBinding(BaseModel):
    """
    A named reference from worker code to a provisioned D1 database.

    Uniqueness is not enforced; two bindings may share a name or an id.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    binding: str = Field(..., description="Binding name used by worker code")
    database_name: str = Field(..., description="D1 database name passed to wrangler")
    database_id: Optional[str] = Field(None, description="D1 database identifier")

    @field_validator("database_name")
    @classmethod
    def validate_database_name(cls, v: str) -> str:
        """Database name is what wrangler executes against, so it can't be blank."""
        if not v or not v.strip():
            raise ValueError("database_name cannot be empty")
        return v.strip()

    @property
    def short_id(self) -> str:
        """First six characters of the identifier, empty when absent."""
        return (self.database_id or "")[:6]

    @property
    def label(self) -> str:
        """Menu label: database name plus a short id prefix."""
        return f"{self.database_name} - {self.short_id}"


class EnvironmentScope(BaseModel):
    """Environment-scoped section of a deployment config (``[env.<name>]``)."""

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    d1_databases: List[DatabaseBinding] = Field(default_factory=list)


class DeploymentConfig(BaseModel):
    """
    Domain model for a wrangler deployment config.

    Database bindings live either in an environment scope or at the top
    level. When ``env`` is empty only the top-level bindings apply.
    """

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = Field(None, description="Worker/project name")
    main: Optional[str] = Field(None, description="Entry point path")
    compatibility_date: Optional[str] = None
    compatibility_flags: List[str] = Field(default_factory=list)
    env: Dict[str, EnvironmentScope] = Field(default_factory=dict)
    d1_databases: List[DatabaseBinding] = Field(default_factory=list)

    @field_validator("env", mode="before")
    @classmethod
    def normalize_env(cls, v):
        """An explicit ``env = null`` means no environments."""
        return v or {}

    @property
    def environments(self) -> List[str]:
        """Environment names in declaration order."""
        return list(self.env)

    def bindings_for(self, environment: Optional[str]) -> List[DatabaseBinding]:
        """
        Return the database bindings visible in a scope.

        Args:
            environment: Environment name, or None for the top-level scope

        Returns:
            Bindings of that scope (possibly empty)

        Raises:
            KeyError: If the environment is not declared
        """
        if environment is None:
            return list(self.d1_databases)
        return list(self.env[environment].d1_databases)
