"""Operation hooks configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from operation_hooks.errors import ConfigurationError

_TRUTHY = ("1", "true", "yes", "on")


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


def _normalise_url(url: str | None) -> str | None:
    # psycopg.connect() wants a plain libpq URL, not the SQLAlchemy driver form
    if url is None:
        return None
    return url.replace("postgresql+psycopg://", "postgresql://")


@dataclass
class OperationHooksConfig:
    """Options controlling which built-in hooks are installed.

    Attributes:
        operation_messages: Expose messages on mutation payloads
        operation_messages_preflight: Accept ``preflight: true`` on mutations
        database_url: PostgreSQL URL used for introspection
        schemas: Schemas whose tables and hook procedures are introspected
    """

    operation_messages: bool = False
    operation_messages_preflight: bool = False
    database_url: str | None = None
    schemas: list[str] = field(default_factory=lambda: ["public"])

    def __post_init__(self) -> None:
        self.database_url = _normalise_url(self.database_url)

    @classmethod
    def from_env(cls) -> OperationHooksConfig:
        """Create config from environment variables.

        OPERATION_MESSAGES / OPERATION_MESSAGES_PREFLIGHT: "1", "true", "yes" or "on"
        DATABASE_URL: PostgreSQL URL
        OPERATION_HOOKS_SCHEMAS: comma-separated schema names (default "public")
        """
        schemas = os.environ.get("OPERATION_HOOKS_SCHEMAS", "")
        return cls(
            operation_messages=_env_flag("OPERATION_MESSAGES"),
            operation_messages_preflight=_env_flag("OPERATION_MESSAGES_PREFLIGHT"),
            database_url=os.environ.get("DATABASE_URL") or None,
            schemas=[s.strip() for s in schemas.split(",") if s.strip()] or ["public"],
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OperationHooksConfig:
        """Create config from a YAML/JSON dict with camelCase keys."""
        schemas = data.get("schemas", ["public"])
        if isinstance(schemas, str):
            schemas = [schemas]
        return cls(
            operation_messages=bool(data.get("operationMessages", False)),
            operation_messages_preflight=bool(data.get("operationMessagesPreflight", False)),
            database_url=data.get("databaseUrl"),
            schemas=list(schemas),
        )

    @classmethod
    def from_yaml(cls, path: Path) -> OperationHooksConfig:
        """Load config from a YAML file.

        Raises:
            ConfigurationError: If the file is not a YAML mapping
        """
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Expected a mapping in {path}")
        return cls.from_dict(data)

    def merged(self, **overrides: Any) -> OperationHooksConfig:
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "operationMessages": self.operation_messages,
            "operationMessagesPreflight": self.operation_messages_preflight,
            "databaseUrl": self.database_url,
            "schemas": list(self.schemas),
        }
