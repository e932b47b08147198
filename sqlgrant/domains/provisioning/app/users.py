"""Creation of the least-privilege MySQL account."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

import pymysql

from sqlgrant.domains.provisioning.domain.models import ProvisionedCredential
from sqlgrant.domains.provisioning.domain.passwords import generate_password, generate_username
from sqlgrant.domains.provisioning.exceptions import ProvisioningSystemError
from sqlgrant.domains.provisioning.providers.mysql import statements
from sqlgrant.domains.provisioning.providers.mysql.adapter import error_message, is_duplicate_user

if TYPE_CHECKING:
    from .session import AdminSession

LOG = logging.getLogger(__name__)


class UserExistsError(Exception):
    """Raised internally when a candidate account name is already taken."""


class UserProvisioner:
    """Creates a randomly named MySQL user with a random password.

    Names come from a small namespace (``ghost-0`` .. ``ghost-999``), so
    collisions with accounts left over from earlier installs are expected.
    The password of an existing account can't be recovered, which is why a
    collision picks a new name instead of reusing the old account. Retries
    are unbounded unless ``max_attempts`` is set.

    Accounts abandoned after a collision are left on the server without a
    usable password.
    """

    def __init__(
        self,
        username_factory: Callable[[], str] = generate_username,
        password_factory: Callable[[], str] = generate_password,
        max_attempts: int | None = None,
    ):
        if max_attempts is not None and max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._username_factory = username_factory
        self._password_factory = password_factory
        self._max_attempts = max_attempts

    def create_user(self, session: AdminSession) -> ProvisionedCredential:
        """Create the account, retrying with a new name on collisions.

        Raises:
            ProvisioningSystemError: If MySQL rejects a statement for any
                reason other than a duplicate user name, or if
                ``max_attempts`` candidates all collided.
        """
        attempts = 0
        while True:
            attempts += 1
            credential = ProvisionedCredential(
                username=self._username_factory(),
                password=self._password_factory(),
            )
            try:
                self._attempt(session, credential)
            except UserExistsError:
                LOG.debug("MySQL: user exists, re-trying user creation with new username")
                if self._max_attempts is not None and attempts >= self._max_attempts:
                    LOG.debug("MySQL: Unable to create custom user")
                    raise ProvisioningSystemError(
                        "Creating new mysql user errored with message: "
                        f"no free username after {attempts} attempts"
                    ) from None
                continue
            except pymysql.MySQLError as exc:
                LOG.debug("MySQL: Unable to create custom user")
                raise ProvisioningSystemError(
                    f"Creating new mysql user errored with message: {error_message(exc)}",
                    cause=exc,
                ) from exc
            return credential

    def _attempt(self, session: AdminSession, credential: ProvisionedCredential) -> None:
        host = session.config.host
        try:
            session.query(statements.create_user(credential.username, host))
        except pymysql.MySQLError as exc:
            if is_duplicate_user(exc):
                raise UserExistsError(credential.username) from exc
            raise
        LOG.debug("MySQL: successfully created new user %s", credential.username)

        session.query(statements.disable_old_passwords())
        LOG.debug("MySQL: successfully disabled old_password")

        session.query(statements.set_password(credential.username, host, credential.password))
        LOG.debug("MySQL: successfully created password for user %s", credential.username)
