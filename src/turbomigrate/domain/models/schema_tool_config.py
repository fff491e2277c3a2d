"""
Schema-tool (drizzle) configuration domain model.

Only ``out`` is interpreted; driver and credential fields are carried so the
``show-config`` command can display them.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_MIGRATIONS_DIR = "drizzle"


class MigrationsTable(BaseModel):
    """Where drizzle keeps its own migration ledger."""

    model_config = ConfigDict(extra="allow")

    table: Optional[str] = None
    schema_: Optional[str] = Field(None, alias="schema")


class SchemaToolConfig(BaseModel):
    """Domain model for a drizzle-kit config."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    out: str = Field(DEFAULT_MIGRATIONS_DIR, description="Migrations output directory")
    schema_: Optional[Union[str, List[str]]] = Field(None, alias="schema")
    dialect: Optional[str] = None
    driver: Optional[str] = None
    db_credentials: Dict[str, Any] = Field(default_factory=dict, alias="dbCredentials")
    breakpoints: Optional[bool] = None
    migrations: Optional[MigrationsTable] = None

    @field_validator("out", mode="before")
    @classmethod
    def default_out(cls, v):
        """Blank or null ``out`` falls back to drizzle's conventional folder."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_MIGRATIONS_DIR
        return v

    @field_validator("db_credentials", mode="before")
    @classmethod
    def normalize_credentials(cls, v):
        return v or {}
