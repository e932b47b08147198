"""Pytest fixtures for sqlgrant tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from sqlgrant.domains.config.store.instance import InstanceConfig

from tests.helpers import write_config


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Keep tests away from the real cwd and environment overrides."""
    monkeypatch.delenv("SQLGRANT_ENVIRONMENT", raising=False)
    monkeypatch.setenv("SQLGRANT_DIR", str(tmp_path))


@pytest.fixture
def root_connection() -> dict[str, Any]:
    return {
        "host": "db.local",
        "port": 3306,
        "user": "root",
        "password": "rootpw",
        "database": "ghost_prod",
    }


@pytest.fixture
def instance_config(tmp_path: Path, root_connection: dict[str, Any]) -> InstanceConfig:
    write_config(tmp_path, root_connection)
    return InstanceConfig.load(tmp_path, "production")
