"""Tests for the MySQL provisioning stage."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pymysql.err import InternalError, OperationalError

from sqlgrant.domains.config.store.instance import InstanceConfig
from sqlgrant.domains.provisioning.app.pipeline import (
    STAGE_TITLE,
    STEP_CONNECT,
    STEP_CREATE_USER,
    STEP_GRANT,
    STEP_SAVE,
    MySQLProvisioningStage,
)
from sqlgrant.domains.provisioning.app.users import UserProvisioner
from sqlgrant.domains.provisioning.domain.models import OutcomeStatus, PipelineState
from sqlgrant.domains.provisioning.exceptions import ConfigError, ProvisioningSystemError

from tests.helpers import (
    FakeConnection,
    FakeConnector,
    duplicate_user_error,
    make_console,
    sequence,
    write_config,
)


def _saved_connection(path: Path) -> dict:
    return json.loads(path.read_text())["database"]["connection"]


def _stage(instance_config, connector, usernames=("ghost-1",)):
    provisioner = UserProvisioner(username_factory=sequence(usernames))
    console, buffer = make_console()
    stage = MySQLProvisioningStage(instance_config, connector=connector, provisioner=provisioner, console=console)
    return stage, buffer


class TestScenario:
    """End-to-end runs against a fake root connection."""

    def test_collision_then_success(self, instance_config: InstanceConfig):
        """A taken name is retried and only the free one gets a password and grants."""
        connection = FakeConnection(
            fail_on=lambda s: duplicate_user_error("ghost-42", "db.local") if "'ghost-42'" in s else None
        )
        connector = FakeConnector(connection)
        stage, _ = _stage(instance_config, connector, usernames=["ghost-42", "ghost-17"])

        outcome = stage.run()

        assert outcome.status is OutcomeStatus.PROVISIONED
        assert outcome.credential is not None
        password = outcome.credential.password
        assert outcome.credential.username == "ghost-17"
        assert len(password) == 10
        assert any(ch.isdigit() for ch in password)
        assert any(not ch.isalnum() for ch in password)

        assert connection.statements == [
            "CREATE USER 'ghost-42'@'db.local' IDENTIFIED WITH mysql_native_password;",
            "CREATE USER 'ghost-17'@'db.local' IDENTIFIED WITH mysql_native_password;",
            "SET old_passwords = 0;",
            f"SET PASSWORD FOR 'ghost-17'@'db.local' = PASSWORD('{password}');",
            "GRANT ALL PRIVILEGES ON `ghost_prod`.* TO 'ghost-17'@'db.local';",
            "FLUSH PRIVILEGES;",
        ]

        saved = _saved_connection(instance_config.file_path)
        assert saved["user"] == "ghost-17"
        assert saved["password"] == password
        assert saved["host"] == "db.local"
        assert saved["database"] == "ghost_prod"
        assert connection.close_calls == 1

    def test_connects_without_target_database(self, instance_config: InstanceConfig):
        """The target database may not exist yet, so it is never selected."""
        connector = FakeConnector()
        stage, _ = _stage(instance_config, connector)

        stage.run()

        config, environment = connector.connect_calls[0]
        assert environment == "production"
        assert "database" not in config.admin_params()
        assert config.admin_params() == {"host": "db.local", "port": 3306, "user": "root", "password": "rootpw"}

    def test_reports_each_step(self, instance_config: InstanceConfig):
        stage, buffer = _stage(instance_config, FakeConnector())

        stage.run()

        output = buffer.getvalue()
        for title in (STEP_CONNECT, STEP_CREATE_USER, STEP_GRANT, STEP_SAVE):
            assert f"✔ {title}" in output

    def test_state_history_on_success(self, instance_config: InstanceConfig):
        stage, _ = _stage(instance_config, FakeConnector())

        stage.run()

        assert stage.history == [
            PipelineState.IDLE,
            PipelineState.CONNECTING,
            PipelineState.CREATING_USER,
            PipelineState.GRANTING_PRIVILEGES,
            PipelineState.COMMITTING,
            PipelineState.DONE,
        ]

    def test_stage_runs_once(self, instance_config: InstanceConfig):
        """A stage instance can only be run once."""
        stage, _ = _stage(instance_config, FakeConnector())
        stage.run()

        with pytest.raises(RuntimeError):
            stage.run()


class TestSkip:
    """Tests for configs that don't use the root account."""

    @pytest.mark.parametrize("user", ["appuser", "ghost-17", "", "ROOT"])
    def test_non_root_user_skips_without_statements(self, tmp_path: Path, user: str):
        write_config(tmp_path, {"host": "db.local", "user": user, "password": "x", "database": "ghost_prod"})
        instance_config = InstanceConfig.load(tmp_path, "production")
        connector = FakeConnector()
        stage, buffer = _stage(instance_config, connector)

        outcome = stage.run()

        assert outcome.status is OutcomeStatus.SKIPPED
        assert outcome.skipped
        assert outcome.credential is None
        assert connector.connect_calls == []
        assert connector.connection.statements == []
        assert connector.connection.close_calls == 0
        assert stage.state is PipelineState.SKIPPED
        assert STAGE_TITLE in buffer.getvalue()
        assert "[skipped]" in buffer.getvalue()

    def test_missing_connection_block_skips(self, tmp_path: Path):
        (tmp_path / "config.production.json").write_text("{}")
        stage, _ = _stage(InstanceConfig.load(tmp_path, "production"), FakeConnector())

        assert stage.run().skipped

    def test_non_root_with_invalid_port_still_skips(self, tmp_path: Path):
        write_config(tmp_path, {"host": "db.local", "port": "abc", "user": "appuser"})
        connector = FakeConnector()
        stage, _ = _stage(InstanceConfig.load(tmp_path, "production"), connector)

        assert stage.run().skipped
        assert connector.connect_calls == []


class TestFailures:
    """Failures stop the run and close the connection once."""

    def test_connect_failure_never_opens_or_closes(self, instance_config: InstanceConfig):
        """Nothing to close when the connection was never opened."""
        error = ConfigError(
            "refused",
            config={"database.connection.host": "db.local", "database.connection.port": 3306},
            environment="production",
            help="help",
        )
        connector = FakeConnector(error=error)
        stage, buffer = _stage(instance_config, connector)

        with pytest.raises(ConfigError):
            stage.run()

        assert connector.connection.statements == []
        assert connector.connection.close_calls == 0
        assert stage.history[-2:] == [PipelineState.CONNECTING, PipelineState.FAILED]
        assert f"✖ {STEP_CONNECT}" in buffer.getvalue()
        assert STEP_CREATE_USER not in buffer.getvalue()

    def test_unclassified_connect_failure_propagates(self, instance_config: InstanceConfig):
        connector = FakeConnector(error=OperationalError(2013, "Lost connection to MySQL server"))
        stage, _ = _stage(instance_config, connector)

        with pytest.raises(OperationalError):
            stage.run()

        assert stage.state is PipelineState.FAILED

    def test_create_failure_closes_once_and_skips_later_steps(self, instance_config: InstanceConfig):
        connection = FakeConnection(
            fail_on=lambda s: InternalError(1227, "Access denied; you need the CREATE USER privilege")
            if s.startswith("CREATE USER")
            else None
        )
        stage, buffer = _stage(instance_config, FakeConnector(connection))

        with pytest.raises(ProvisioningSystemError) as excinfo:
            stage.run()

        assert "Creating new mysql user errored with message" in str(excinfo.value)
        assert "CREATE USER privilege" in str(excinfo.value)
        assert connection.close_calls == 1
        assert not any(s.startswith("GRANT") for s in connection.statements)
        assert _saved_connection(instance_config.file_path)["user"] == "root"
        assert STEP_GRANT not in buffer.getvalue()

    def test_set_password_failure_is_system_error(self, instance_config: InstanceConfig):
        connection = FakeConnection(
            fail_on=lambda s: OperationalError(1064, "syntax error") if s.startswith("SET PASSWORD") else None
        )
        stage, _ = _stage(instance_config, FakeConnector(connection))

        with pytest.raises(ProvisioningSystemError):
            stage.run()

        assert connection.close_calls == 1

    def test_grant_failure_leaves_config_untouched(self, instance_config: InstanceConfig):
        """A user without grants is never written to the config."""
        before = instance_config.file_path.read_text()
        connection = FakeConnection(
            fail_on=lambda s: OperationalError(1044, "Access denied for user 'root'@'%' to database 'ghost_prod'")
            if s.startswith("GRANT")
            else None
        )
        stage, _ = _stage(instance_config, FakeConnector(connection))

        with pytest.raises(ProvisioningSystemError) as excinfo:
            stage.run()

        assert "Granting database permissions errored with message" in str(excinfo.value)
        assert instance_config.file_path.read_text() == before
        assert instance_config.get("database.connection.user") == "root"
        assert connection.close_calls == 1
        assert stage.history[-2:] == [PipelineState.GRANTING_PRIVILEGES, PipelineState.FAILED]

    def test_flush_failure_leaves_config_untouched(self, instance_config: InstanceConfig):
        before = instance_config.file_path.read_text()
        connection = FakeConnection(
            fail_on=lambda s: OperationalError(1227, "denied") if s.startswith("FLUSH") else None
        )
        stage, _ = _stage(instance_config, FakeConnector(connection))

        with pytest.raises(ProvisioningSystemError):
            stage.run()

        assert instance_config.file_path.read_text() == before
        assert connection.close_calls == 1

    def test_save_failure_propagates_and_closes(self, instance_config: InstanceConfig, monkeypatch):
        connection = FakeConnection()
        stage, _ = _stage(instance_config, FakeConnector(connection))

        def broken_save():
            raise OSError("disk full")

        monkeypatch.setattr(instance_config, "save", broken_save)

        with pytest.raises(OSError):
            stage.run()

        assert connection.close_calls == 1
        assert stage.state is PipelineState.FAILED

    def test_invalid_port_is_config_error(self, tmp_path: Path):
        """A non-numeric port names the port key instead of crashing."""
        write_config(tmp_path, {"host": "db.local", "port": "abc", "user": "root", "password": "rootpw"})
        connector = FakeConnector()
        stage, _ = _stage(InstanceConfig.load(tmp_path, "production"), connector)

        with pytest.raises(ConfigError) as excinfo:
            stage.run()

        assert excinfo.value.config == {"database.connection.port": "abc"}
        assert excinfo.value.environment == "production"
        assert "Invalid port 'abc'" in excinfo.value.message
        assert connector.connect_calls == []

    def test_missing_credential_fails_grant_step(self, instance_config: InstanceConfig):
        connection = FakeConnection()
        stage, buffer = _stage(instance_config, FakeConnector(connection))
        stage.provisioner = _NoCredentialProvisioner()

        with pytest.raises(RuntimeError, match="No MySQL user"):
            stage.run()

        assert connection.statements == []
        assert connection.close_calls == 1
        assert stage.history[-2:] == [PipelineState.GRANTING_PRIVILEGES, PipelineState.FAILED]
        assert f"✖ {STEP_GRANT}" in buffer.getvalue()


class _NoCredentialProvisioner(UserProvisioner):
    def create_user(self, session):
        return None
