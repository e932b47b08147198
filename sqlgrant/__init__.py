"""sqlgrant - Provision least-privilege MySQL users for an instance."""

from typing import TYPE_CHECKING, Any

__all__ = [
    "__version__",
    "main",
    "MySQLProvisioningStage",
    "InstanceConfig",
]

__version__ = "0.1.0"

if TYPE_CHECKING:
    from .cli import main
    from sqlgrant.domains.config.store.instance import InstanceConfig
    from sqlgrant.domains.provisioning.app.pipeline import MySQLProvisioningStage


def __getattr__(name: str) -> Any:
    """Lazy import so ``import sqlgrant`` doesn't pull in the MySQL driver."""
    if name == "main":
        from .cli import main

        return main
    if name == "MySQLProvisioningStage":
        from sqlgrant.domains.provisioning.app.pipeline import MySQLProvisioningStage

        return MySQLProvisioningStage
    if name == "InstanceConfig":
        from sqlgrant.domains.config.store.instance import InstanceConfig

        return InstanceConfig
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
