"""Decide whether the MySQL stage applies to an install."""

from __future__ import annotations

# Engines that run in-process and have no server accounts to manage.
NON_NETWORKED_ENGINES = frozenset({"sqlite3"})


def should_provision_mysql(local: bool = False, db: str | None = None) -> bool:
    """Local installs and sqlite installs skip the MySQL stage."""
    if local:
        return False
    return (db or "").lower() not in NON_NETWORKED_ENGINES
