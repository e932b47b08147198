"""Administrative connection settings read from the instance config."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

# Only this user is trusted to create accounts and grant privileges.
ROOT_USER = "root"
DEFAULT_PORT = 3306

CONNECTION_KEY = "database.connection"
HOST_KEY = "database.connection.host"
PORT_KEY = "database.connection.port"
USER_KEY = "database.connection.user"
PASSWORD_KEY = "database.connection.password"
DATABASE_KEY = "database.connection.database"


def parse_port(value: Any) -> int | None:
    """Parse a configured port. Empty values fall back to the default port.

    Raises:
        ValueError: If the value isn't a whole number.
    """
    if value in ("", None):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid port '{value}'") from None


def is_root_connection(settings: Mapping[str, Any] | None) -> bool:
    return str((settings or {}).get("user") or "") == ROOT_USER


@dataclass(frozen=True)
class ConnectionConfig:
    """MySQL connection configuration."""

    host: str = ""
    port: int | None = None
    user: str = ""
    password: str = ""
    database: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> ConnectionConfig:
        """Create a ConnectionConfig from a ``database.connection`` mapping."""
        payload = dict(data or {})
        return cls(
            host=str(payload.get("host") or ""),
            port=parse_port(payload.get("port")),
            user=str(payload.get("user") or ""),
            password=str(payload.get("password") or ""),
            database=str(payload.get("database") or ""),
        )

    @property
    def effective_port(self) -> int:
        return self.port if self.port is not None else DEFAULT_PORT

    def display_port(self) -> str | int:
        """Port as shown in error messages ("3306" when unset)."""
        return self.port if self.port is not None else str(DEFAULT_PORT)

    def admin_params(self) -> dict[str, Any]:
        """Connection parameters without the target database.

        The target database may not exist yet, so the administrative
        connection must not select it.
        """
        return {
            "host": self.host,
            "port": self.effective_port,
            "user": self.user,
            "password": self.password,
        }
