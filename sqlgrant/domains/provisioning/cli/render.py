"""Rendering of provisioning errors for the terminal."""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.markup import escape

from sqlgrant.domains.provisioning.exceptions import ConfigError, ProvisioningError


def mask_value(key: str, value: Any) -> str:
    if key.endswith("password"):
        return "*****" if value else "(empty)"
    if value in (None, ""):
        return "(empty)"
    return str(value)


def render_error(console: Console, error: ProvisioningError) -> None:
    """Print an error the way the setup command reports failures."""
    if isinstance(error, ConfigError):
        console.print(f"[red]Error: {escape(error.message)}[/red]", highlight=False)
        console.print(
            f"\nYour config file for the [bold]{escape(error.environment)}[/bold] environment "
            "contains an invalid value:",
            highlight=False,
        )
        for key, value in error.config.items():
            console.print(f"  {escape(key)}: {escape(mask_value(key, value))}", highlight=False)
        console.print(f"\n[blue]Help:[/blue] {escape(error.help)}", highlight=False)
        return

    console.print(f"[red]Error: {escape(str(error))}[/red]", highlight=False)
