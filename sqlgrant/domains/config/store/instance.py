"""Instance configuration store (``config.<environment>.json``)."""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any

from sqlgrant.shared.core.store import InvalidStoreError, JSONFileStore

DEFAULT_ENVIRONMENT = "production"

_MISSING = object()


def resolve_instance_dir() -> Path:
    override = os.environ.get("SQLGRANT_DIR", "").strip()
    if override:
        return Path(override).expanduser()
    return Path.cwd()


def resolve_environment(environment: str | None = None) -> str:
    """Pick the environment name from the argument, env var, or default."""
    if environment:
        return environment
    override = os.environ.get("SQLGRANT_ENVIRONMENT", "").strip()
    return override or DEFAULT_ENVIRONMENT


def config_file_name(environment: str) -> str:
    return f"config.{environment}.json"


class InstanceConfig(JSONFileStore):
    """Dotted-key view over an instance's JSON configuration.

    Values are addressed with dotted paths such as
    ``database.connection.host``. Changes stay in memory until
    :meth:`save` writes the whole document back to disk.

    Example:
        config = InstanceConfig.load(Path("/var/www/blog"), "production")
        config.set("database.connection.user", "ghost-17").save()
    """

    def __init__(self, file_path: Path, environment: str = DEFAULT_ENVIRONMENT) -> None:
        super().__init__(file_path)
        self.environment = environment
        data = self._read_json()
        if data is not None and not isinstance(data, dict):
            raise InvalidStoreError(file_path, "expected a JSON object at the top level")
        self._data: dict[str, Any] = data or {}

    @classmethod
    def load(cls, directory: Path | None = None, environment: str | None = None) -> InstanceConfig:
        """Load the config for an environment from an instance directory.

        Raises:
            InvalidStoreError: If the config file exists but can't be parsed.
        """
        env = resolve_environment(environment)
        base = Path(directory) if directory is not None else resolve_instance_dir()
        return cls(base.expanduser() / config_file_name(env), environment=env)

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value at a dotted key, or ``default`` if unset.

        Nested objects are returned as copies so callers can't mutate the
        store behind its back.
        """
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return copy.deepcopy(node)

    def has(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def set(self, key: str, value: Any) -> InstanceConfig:
        """Set the value at a dotted key, creating parents as needed."""
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value
        return self

    def save(self) -> InstanceConfig:
        """Persist the configuration to disk."""
        self._write_json(self._data)
        return self

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)
