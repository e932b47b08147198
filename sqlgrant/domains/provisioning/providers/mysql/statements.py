"""The fixed administrative statements issued while provisioning a user.

Values are interpolated into the statement text (MySQL account names can't
be bound as parameters), so every literal goes through PyMySQL's
``escape_string`` and every identifier is backtick-quoted.
"""

from __future__ import annotations

import re

from pymysql.converters import escape_string

_PASSWORD_LITERAL = re.compile(r"PASSWORD\('(?:[^'\\]|\\.)*'\)")


def quote_literal(value: str) -> str:
    return f"'{escape_string(value)}'"


def quote_identifier(value: str) -> str:
    escaped = value.replace("`", "``")
    return f"`{escaped}`"


def account(username: str, host: str) -> str:
    """Render a MySQL account name (``'user'@'host'``)."""
    return f"{quote_literal(username)}@{quote_literal(host)}"


def create_user(username: str, host: str) -> str:
    return f"CREATE USER {account(username, host)} IDENTIFIED WITH mysql_native_password;"


def disable_old_passwords() -> str:
    return "SET old_passwords = 0;"


def set_password(username: str, host: str, password: str) -> str:
    return f"SET PASSWORD FOR {account(username, host)} = PASSWORD({quote_literal(password)});"


def grant_all_privileges(database: str, username: str, host: str) -> str:
    return f"GRANT ALL PRIVILEGES ON {quote_identifier(database)}.* TO {account(username, host)};"


def flush_privileges() -> str:
    return "FLUSH PRIVILEGES;"


def redact(statement: str) -> str:
    """Hide password literals so statements can be logged."""
    return _PASSWORD_LITERAL.sub("PASSWORD('***')", statement)
