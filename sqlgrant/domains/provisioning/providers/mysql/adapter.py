"""MySQL administrative connections using PyMySQL (pure Python)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import pymysql
from pymysql.constants import CR, ER

from sqlgrant.domains.provisioning.domain.config import (
    HOST_KEY,
    PASSWORD_KEY,
    PORT_KEY,
    USER_KEY,
)
from sqlgrant.domains.provisioning.exceptions import (
    RECONFIGURE_COMMAND,
    SETUP_COMMAND,
    ConfigError,
)

from .statements import redact

if TYPE_CHECKING:
    from sqlgrant.domains.provisioning.domain.config import ConnectionConfig

LOG = logging.getLogger(__name__)

UNREACHABLE_ERRORS = frozenset({CR.CR_CONN_HOST_ERROR, CR.CR_UNKNOWN_HOST})
ACCESS_DENIED_ERRORS = frozenset({ER.ACCESS_DENIED_ERROR})
DUPLICATE_USER_ERROR = ER.CANNOT_USER


def error_code(error: BaseException) -> int | None:
    """Return the MySQL error number carried by a PyMySQL exception."""
    args = getattr(error, "args", ())
    if args and isinstance(args[0], int):
        return args[0]
    return None


def error_message(error: BaseException) -> str:
    args = getattr(error, "args", ())
    if len(args) >= 2 and isinstance(args[1], str):
        return args[1]
    return str(error)


def is_duplicate_user(error: BaseException) -> bool:
    return error_code(error) == DUPLICATE_USER_ERROR


def classify_connect_error(
    error: BaseException, config: ConnectionConfig, environment: str
) -> ConfigError | None:
    """Map a failed connect to a ConfigError, or None if it isn't a config problem."""
    code = error_code(error)
    if code in UNREACHABLE_ERRORS:
        return ConfigError(
            error_message(error),
            config={
                HOST_KEY: config.host,
                PORT_KEY: config.display_port(),
            },
            environment=environment,
            help=(
                "Please ensure that MySQL is installed and reachable. "
                f"You can always re-run `{SETUP_COMMAND}` to try again."
            ),
        )
    if code in ACCESS_DENIED_ERRORS:
        return ConfigError(
            error_message(error),
            config={
                USER_KEY: config.user,
                PASSWORD_KEY: config.password,
            },
            environment=environment,
            help=(
                f"You can run `{RECONFIGURE_COMMAND}` to re-enter the correct credentials. "
                f"Alternatively you can run `{SETUP_COMMAND}` again."
            ),
        )
    return None


class MySQLConnector:
    """Opens administrative connections and runs statements on them."""

    def connect(self, config: ConnectionConfig, environment: str) -> Any:
        """Connect to the MySQL server without selecting a database.

        Raises:
            ConfigError: If the server is unreachable or rejects the credentials.
            pymysql.MySQLError: For any other connection failure.
        """
        params = config.admin_params()
        LOG.debug("MySQL: connecting to %s:%s as %s", params["host"], params["port"], params["user"])
        try:
            return pymysql.connect(
                **params,
                autocommit=True,
                charset="utf8mb4",
            )
        except pymysql.MySQLError as exc:
            classified = classify_connect_error(exc, config, environment)
            if classified is None:
                raise
            raise classified from exc

    def query(self, connection: Any, statement: str) -> None:
        """Execute a single statement, waiting for it to complete."""
        LOG.debug("MySQL: running query > %s", redact(statement))
        with connection.cursor() as cursor:
            cursor.execute(statement)
