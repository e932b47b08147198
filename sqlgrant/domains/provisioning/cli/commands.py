"""CLI command handlers for ``sqlgrant setup``."""

from __future__ import annotations

import logging
from typing import Any

import pymysql
from rich.console import Console
from rich.markup import escape

from sqlgrant.domains.config.store.instance import InstanceConfig
from sqlgrant.domains.provisioning.app.eligibility import should_provision_mysql
from sqlgrant.domains.provisioning.app.pipeline import STAGE_TITLE, MySQLProvisioningStage
from sqlgrant.domains.provisioning.app.users import UserProvisioner
from sqlgrant.domains.provisioning.exceptions import ProvisioningError
from sqlgrant.shared.core.store import InvalidStoreError
from sqlgrant.shared.ui.progress import TaskList, TaskStatus

from .render import render_error

LOG = logging.getLogger(__name__)


def cmd_setup(args: Any, console: Console | None = None) -> int:
    """Provision a least-privilege MySQL user for the instance."""
    console = console or Console(stderr=True)
    try:
        instance_config = InstanceConfig.load(getattr(args, "dir", None), getattr(args, "environment", None))
    except InvalidStoreError as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]", highlight=False)
        return 1

    db = getattr(args, "db", None) or instance_config.get("database.client")
    if not should_provision_mysql(local=bool(getattr(args, "local", False)), db=db):
        LOG.debug("MySQL stage not applicable (local=%s, db=%s)", getattr(args, "local", False), db)
        TaskList([], console=console).report(STAGE_TITLE, TaskStatus.SKIPPED)
        return 0

    if not instance_config.exists():
        console.print(
            f"[red]Error: No config found at {escape(str(instance_config.file_path))}.[/red] "
            "Run `sqlgrant config` to set the database connection first.",
            highlight=False,
        )
        return 1

    stage = MySQLProvisioningStage(
        instance_config,
        provisioner=UserProvisioner(max_attempts=getattr(args, "max_attempts", None)),
        console=console,
    )
    try:
        outcome = stage.run()
    except ProvisioningError as exc:
        render_error(console, exc)
        return 1
    except pymysql.MySQLError as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]", highlight=False)
        return 1

    if outcome.credential is not None:
        console.print(
            f"MySQL user [bold]{escape(outcome.credential.username)}[/bold] saved to "
            f"{escape(str(instance_config.file_path))}",
            highlight=False,
        )
    return 0
