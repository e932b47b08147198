"""Persist provisioned credentials into the instance config."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlgrant.domains.provisioning.domain.config import PASSWORD_KEY, USER_KEY

if TYPE_CHECKING:
    from sqlgrant.domains.config.store.instance import InstanceConfig
    from sqlgrant.domains.provisioning.domain.models import ProvisionedCredential


def commit_credential(instance_config: InstanceConfig, credential: ProvisionedCredential) -> None:
    instance_config.set(USER_KEY, credential.username).set(PASSWORD_KEY, credential.password).save()
