"""Privilege grants for the provisioned account."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pymysql

from sqlgrant.domains.provisioning.exceptions import ProvisioningSystemError
from sqlgrant.domains.provisioning.providers.mysql import statements
from sqlgrant.domains.provisioning.providers.mysql.adapter import error_message

if TYPE_CHECKING:
    from sqlgrant.domains.provisioning.domain.models import ProvisionedCredential

    from .session import AdminSession

LOG = logging.getLogger(__name__)


def grant_privileges(session: AdminSession, credential: ProvisionedCredential) -> None:
    """Grant everything on the target database, then flush privileges."""
    config = session.config
    try:
        session.query(
            statements.grant_all_privileges(config.database, credential.username, config.host)
        )
        LOG.debug('MySQL: Successfully granted privileges for user "%s"', credential.username)
        session.query(statements.flush_privileges())
        LOG.debug("MySQL: flushed privileges")
    except pymysql.MySQLError as exc:
        LOG.debug("MySQL: Unable either to grant permissions or flush privileges")
        raise ProvisioningSystemError(
            f"Granting database permissions errored with message: {error_message(exc)}",
            cause=exc,
        ) from exc
