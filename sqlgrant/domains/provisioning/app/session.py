"""Administrative session owning the MySQL connection for one pipeline run."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sqlgrant.domains.provisioning.domain.config import ConnectionConfig
    from sqlgrant.domains.provisioning.providers.mysql.adapter import MySQLConnector

LOG = logging.getLogger(__name__)


class AdminSession:
    """Scoped owner of the administrative connection.

    The connection is opened lazily by :meth:`open` and released by
    :meth:`close`, which runs at most once no matter how many exit paths
    reach it.

    Usage:
        with AdminSession(connector, config, "production") as session:
            session.open()
            session.query("FLUSH PRIVILEGES;")
    """

    def __init__(self, connector: MySQLConnector, config: ConnectionConfig, environment: str):
        self._connector = connector
        self._config = config
        self._environment = environment
        self._connection: Any | None = None
        self._closed = False

    @property
    def config(self) -> ConnectionConfig:
        return self._config

    @property
    def connection(self) -> Any:
        if self._connection is None:
            raise RuntimeError("Administrative connection is not open")
        return self._connection

    @property
    def is_open(self) -> bool:
        return self._connection is not None

    @property
    def is_closed(self) -> bool:
        return self._closed

    def open(self) -> Any:
        """Open the connection (errors from the connector propagate)."""
        if self._closed:
            raise RuntimeError("Cannot reopen a closed session")
        if self._connection is None:
            self._connection = self._connector.connect(self._config, self._environment)
        return self._connection

    def query(self, statement: str) -> None:
        self._connector.query(self.connection, statement)

    def close(self) -> None:
        """Close the connection if one was opened. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True
        connection, self._connection = self._connection, None
        if connection is not None:
            connection.close()
            LOG.debug("MySQL: connection closed")

    def __enter__(self) -> AdminSession:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
