"""CLI command handlers for ``sqlgrant config``."""

from __future__ import annotations

import getpass
import json
from typing import Any

from rich.console import Console
from rich.markup import escape

from sqlgrant.domains.config.store.instance import InstanceConfig
from sqlgrant.domains.provisioning.domain.config import (
    DATABASE_KEY,
    HOST_KEY,
    PASSWORD_KEY,
    PORT_KEY,
    USER_KEY,
)
from sqlgrant.shared.core.store import InvalidStoreError

# argparse dest -> config key
CONNECTION_OPTIONS: dict[str, str] = {
    "db_host": HOST_KEY,
    "db_port": PORT_KEY,
    "db_user": USER_KEY,
    "db_password": PASSWORD_KEY,
    "db_name": DATABASE_KEY,
}


def parse_value(raw: str) -> Any:
    """Interpret a CLI value as JSON when possible (numbers, booleans), else text."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def _collect_connection_updates(args: Any) -> dict[str, Any]:
    updates: dict[str, Any] = {}
    for dest, key in CONNECTION_OPTIONS.items():
        value = getattr(args, dest, None)
        if value is None:
            continue
        if dest == "db_port":
            try:
                value = int(value)
            except ValueError:
                raise ValueError(f"Invalid port '{value}'") from None
        updates[key] = value
    if getattr(args, "prompt_password", False):
        updates[PASSWORD_KEY] = getpass.getpass("MySQL password: ")
    return updates


def cmd_config(args: Any, console: Console | None = None) -> int:
    """Read or update the instance configuration."""
    console = console or Console()
    try:
        instance_config = InstanceConfig.load(getattr(args, "dir", None), getattr(args, "environment", None))
    except InvalidStoreError as exc:
        print(f"Error: {exc}")
        return 1

    try:
        updates = _collect_connection_updates(args)
    except ValueError as exc:
        print(f"Error: {exc}")
        return 1

    key = getattr(args, "key", None)
    value = getattr(args, "value", None)
    if key is not None and value is not None:
        updates[key] = value if key.endswith("password") else parse_value(value)

    if updates:
        for update_key, update_value in updates.items():
            instance_config.set(update_key, update_value)
        instance_config.save()
        print(f"Saved {len(updates)} setting(s) to {instance_config.file_path}")
        return 0

    if key is None:
        console.print_json(data=instance_config.to_dict())
        return 0

    if not instance_config.has(key):
        print(f"Error: '{key}' is not set in the {instance_config.environment} config.")
        return 1
    current = instance_config.get(key)
    if isinstance(current, (dict, list)):
        console.print_json(data=current)
    else:
        console.print(escape(str(current)), highlight=False)
    return 0
