"""The MySQL user provisioning stage.

Runs four named steps against one administrative connection:

1. Connecting to database
2. Creating new MySQL user (retries internally on name collisions)
3. Granting new user permissions
4. Saving new config

The configuration is only written after the user exists and has its
grants, and the connection is closed exactly once whichever way the run
ends.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from rich.console import Console

from sqlgrant.domains.provisioning.domain.config import (
    CONNECTION_KEY,
    PORT_KEY,
    ROOT_USER,
    ConnectionConfig,
    is_root_connection,
)
from sqlgrant.domains.provisioning.domain.models import (
    OutcomeStatus,
    PipelineState,
    ProvisionedCredential,
    ProvisioningOutcome,
    can_transition,
)
from sqlgrant.domains.provisioning.exceptions import RECONFIGURE_COMMAND, ConfigError
from sqlgrant.domains.provisioning.providers.mysql.adapter import MySQLConnector
from sqlgrant.shared.ui.progress import Task, TaskList, TaskStatus

from .commit import commit_credential
from .grants import grant_privileges
from .session import AdminSession
from .users import UserProvisioner

if TYPE_CHECKING:
    from sqlgrant.domains.config.store.instance import InstanceConfig

LOG = logging.getLogger(__name__)

STAGE_TITLE = 'Setting up "ghost" mysql user'

STEP_CONNECT = "Connecting to database"
STEP_CREATE_USER = "Creating new MySQL user"
STEP_GRANT = "Granting new user permissions"
STEP_SAVE = "Saving new config"


@dataclass
class _RunState:
    session: AdminSession
    credential: ProvisionedCredential | None = None


def _require_credential(run: _RunState) -> ProvisionedCredential:
    if run.credential is None:
        raise RuntimeError("No MySQL user has been created yet")
    return run.credential


class MySQLProvisioningStage:
    """Orchestrates connect → create user → grant → commit."""

    def __init__(
        self,
        instance_config: InstanceConfig,
        *,
        connector: MySQLConnector | None = None,
        provisioner: UserProvisioner | None = None,
        console: Console | None = None,
    ):
        self.instance_config = instance_config
        self.connector = connector or MySQLConnector()
        self.provisioner = provisioner or UserProvisioner()
        self.console = console or Console(stderr=True)
        self.state = PipelineState.IDLE
        self.history: list[PipelineState] = [PipelineState.IDLE]

    def _transition(self, target: PipelineState) -> None:
        if not can_transition(self.state, target):
            raise RuntimeError(f"Invalid transition {self.state.value} -> {target.value}")
        self.state = target
        self.history.append(target)

    def run(self) -> ProvisioningOutcome:
        """Run the stage.

        Returns:
            The outcome; ``skipped`` when the configured user isn't root.

        Raises:
            ConfigError: If the connection settings are wrong.
            ProvisioningSystemError: If creating the user or granting fails.
        """
        if self.state is not PipelineState.IDLE:
            raise RuntimeError("Provisioning stage can only run once")

        settings = self.instance_config.get(CONNECTION_KEY)
        if not isinstance(settings, dict):
            settings = {}
        if not is_root_connection(settings):
            LOG.warning('MySQL user is not "%s", skipping additional user setup', ROOT_USER)
            self._transition(PipelineState.SKIPPED)
            TaskList([], console=self.console).report(STAGE_TITLE, TaskStatus.SKIPPED)
            return ProvisioningOutcome(OutcomeStatus.SKIPPED)

        config = self._connection_config(settings)

        with AdminSession(self.connector, config, self.instance_config.environment) as session:
            run = _RunState(session=session)
            tasks = TaskList(
                [
                    Task(STEP_CONNECT, lambda: self._connect(run)),
                    Task(STEP_CREATE_USER, lambda: self._create_user(run)),
                    Task(STEP_GRANT, lambda: self._grant(run)),
                    Task(STEP_SAVE, lambda: self._commit(run)),
                ],
                console=self.console,
            )
            try:
                tasks.run()
            except Exception:
                self._transition(PipelineState.FAILED)
                raise

        self._transition(PipelineState.DONE)
        return ProvisioningOutcome(OutcomeStatus.PROVISIONED, run.credential)

    def _connection_config(self, settings: dict[str, Any]) -> ConnectionConfig:
        try:
            return ConnectionConfig.from_dict(settings)
        except ValueError as exc:
            raise ConfigError(
                str(exc),
                config={PORT_KEY: settings.get("port")},
                environment=self.instance_config.environment,
                help=f"You can run `{RECONFIGURE_COMMAND} --db-port` to set a numeric port.",
            ) from exc

    def _connect(self, run: _RunState) -> None:
        self._transition(PipelineState.CONNECTING)
        run.session.open()

    def _create_user(self, run: _RunState) -> ProvisionedCredential:
        self._transition(PipelineState.CREATING_USER)
        run.credential = self.provisioner.create_user(run.session)
        return run.credential

    def _grant(self, run: _RunState) -> None:
        self._transition(PipelineState.GRANTING_PRIVILEGES)
        grant_privileges(run.session, _require_credential(run))

    def _commit(self, run: _RunState) -> None:
        self._transition(PipelineState.COMMITTING)
        commit_credential(self.instance_config, _require_credential(run))
