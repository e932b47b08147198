"""Test doubles for MySQL connections."""

from __future__ import annotations

import io
import json
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from pymysql.err import OperationalError
from rich.console import Console

from sqlgrant.domains.provisioning.domain.config import ConnectionConfig
from sqlgrant.domains.provisioning.providers.mysql.adapter import MySQLConnector

DUPLICATE_USER = 1396


def duplicate_user_error(username: str, host: str = "localhost") -> OperationalError:
    return OperationalError(DUPLICATE_USER, f"Operation CREATE USER failed for '{username}'@'{host}'")


class FakeCursor:
    def __init__(self, connection: FakeConnection):
        self._connection = connection

    def execute(self, statement: str) -> int:
        self._connection.statements.append(statement)
        error = self._connection.fail_on(statement)
        if error is not None:
            raise error
        return 0

    def __enter__(self) -> FakeCursor:
        return self

    def __exit__(self, *exc: Any) -> None:
        return None


class FakeConnection:
    """Records every statement; ``fail_on`` maps a statement to an error (or None)."""

    def __init__(self, fail_on: Callable[[str], BaseException | None] | None = None):
        self.statements: list[str] = []
        self.close_calls = 0
        self.fail_on = fail_on or (lambda statement: None)

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)

    def close(self) -> None:
        self.close_calls += 1

    @property
    def create_user_statements(self) -> list[str]:
        return [s for s in self.statements if s.startswith("CREATE USER")]


class FakeConnector(MySQLConnector):
    """Connector that hands out a FakeConnection or raises a connect error."""

    def __init__(self, connection: FakeConnection | None = None, error: BaseException | None = None):
        self.connection = connection or FakeConnection()
        self.error = error
        self.connect_calls: list[tuple[ConnectionConfig, str]] = []

    def connect(self, config: ConnectionConfig, environment: str) -> Any:
        self.connect_calls.append((config, environment))
        if self.error is not None:
            raise self.error
        return self.connection


def sequence(values: Iterable[str]) -> Callable[[], str]:
    iterator = iter(values)
    return lambda: next(iterator)


def make_console() -> tuple[Console, io.StringIO]:
    buffer = io.StringIO()
    return Console(file=buffer, force_terminal=False, color_system=None, width=120), buffer


def write_config(directory: Path, connection: dict[str, Any], environment: str = "production", **extra: Any) -> Path:
    """Write a config.<environment>.json with the given database.connection block."""
    data: dict[str, Any] = {"url": "http://localhost:2368", "database": {"client": "mysql", "connection": connection}}
    data.update(extra)
    path = directory / f"config.{environment}.json"
    path.write_text(json.dumps(data, indent=2))
    return path
