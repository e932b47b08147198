"""Custom exceptions for the provisioning stage."""

from __future__ import annotations

from typing import Any, Mapping

RECONFIGURE_COMMAND = "sqlgrant config"
SETUP_COMMAND = "sqlgrant setup"


class ProvisioningError(Exception):
    """Base class for errors surfaced to the user by ``sqlgrant setup``."""


class ConfigError(ProvisioningError):
    """Exception raised when the administrative connection settings are wrong.

    Attributes:
        message: Human readable description, usually the driver's message.
        config: The implicated configuration keys and their current values.
        environment: Name of the environment whose config was used.
        help: Remediation hint pointing at the reconfigure/setup commands.
    """

    def __init__(
        self,
        message: str,
        *,
        config: Mapping[str, Any],
        environment: str,
        help: str,
    ):
        self.message = message
        self.config = dict(config)
        self.environment = environment
        self.help = help
        super().__init__(message)

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(self.config)


class ProvisioningSystemError(ProvisioningError):
    """Exception raised when the database rejects an administrative statement."""

    def __init__(self, message: str, *, cause: BaseException | None = None):
        self.message = message
        self.cause = cause
        super().__init__(message)
