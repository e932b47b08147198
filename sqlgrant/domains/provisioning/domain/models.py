"""Provisioning results and pipeline states."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class ProvisionedCredential:
    """A freshly created MySQL account and its password."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"ProvisionedCredential(username={self.username!r}, password='***')"


class OutcomeStatus(str, Enum):
    PROVISIONED = "provisioned"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ProvisioningOutcome:
    status: OutcomeStatus
    credential: ProvisionedCredential | None = None

    @property
    def skipped(self) -> bool:
        return self.status is OutcomeStatus.SKIPPED


class PipelineState(Enum):
    """States of the MySQL provisioning stage."""

    IDLE = "idle"
    CONNECTING = "connecting"
    CREATING_USER = "creating_user"
    GRANTING_PRIVILEGES = "granting_privileges"
    COMMITTING = "committing"
    DONE = "done"
    FAILED = "failed"
    SKIPPED = "skipped"


_IN_FLIGHT = (
    PipelineState.CONNECTING,
    PipelineState.CREATING_USER,
    PipelineState.GRANTING_PRIVILEGES,
    PipelineState.COMMITTING,
)

TRANSITIONS: dict[PipelineState, frozenset[PipelineState]] = {
    PipelineState.IDLE: frozenset({PipelineState.CONNECTING, PipelineState.SKIPPED}),
    PipelineState.CONNECTING: frozenset({PipelineState.CREATING_USER}),
    PipelineState.CREATING_USER: frozenset({PipelineState.GRANTING_PRIVILEGES}),
    PipelineState.GRANTING_PRIVILEGES: frozenset({PipelineState.COMMITTING}),
    PipelineState.COMMITTING: frozenset({PipelineState.DONE}),
    PipelineState.DONE: frozenset(),
    PipelineState.FAILED: frozenset(),
    PipelineState.SKIPPED: frozenset(),
}
# Any in-flight state may fail.
for _state in _IN_FLIGHT:
    TRANSITIONS[_state] = TRANSITIONS[_state] | {PipelineState.FAILED}


def can_transition(current: PipelineState, target: PipelineState) -> bool:
    return target in TRANSITIONS[current]
