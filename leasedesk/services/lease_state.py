"""
Lease State Machine
Explicit transition table: operation -> (allowed source states, target state).

  render    Draft | Generated | Sent            -> Generated
  send      Generated | Sent                    -> Sent
  sign      Sent  (administrators: also Draft | Generated)  -> Signed
  complete  Signed                              -> Completed
  cancel    Draft | Generated | Sent            -> Cancelled

Completed and Cancelled are terminal, and a signed lease only moves on to
Completed, so is_signed always implies Signed or Completed. Nothing here
compares statuses numerically; "is at least Sent" style checks are
expressed as explicit sets.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, FrozenSet, NamedTuple, Optional

from leasedesk.models.lease import LeaseAgreement, LeaseStatus

logger = logging.getLogger(__name__)

S = LeaseStatus


class LeaseOperation(str, Enum):
    RENDER = "render"
    SEND = "send"
    SIGN = "sign"
    COMPLETE = "complete"
    CANCEL = "cancel"


class Transition(NamedTuple):
    sources: FrozenSet[LeaseStatus]
    target: LeaseStatus
    privileged_sources: FrozenSet[LeaseStatus] = frozenset()


TRANSITIONS: Dict[LeaseOperation, Transition] = {
    LeaseOperation.RENDER: Transition(frozenset({S.DRAFT, S.GENERATED, S.SENT}), S.GENERATED),
    LeaseOperation.SEND: Transition(frozenset({S.GENERATED, S.SENT}), S.SENT),
    LeaseOperation.SIGN: Transition(
        frozenset({S.SENT}), S.SIGNED, privileged_sources=frozenset({S.DRAFT, S.GENERATED})
    ),
    LeaseOperation.COMPLETE: Transition(frozenset({S.SIGNED}), S.COMPLETED),
    LeaseOperation.CANCEL: Transition(frozenset({S.DRAFT, S.GENERATED, S.SENT}), S.CANCELLED),
}

TERMINAL_STATES: FrozenSet[LeaseStatus] = frozenset({S.COMPLETED, S.CANCELLED})

# States in which a tenant may open the lease (the "at least Sent" gate)
TENANT_VISIBLE_STATES: FrozenSet[LeaseStatus] = frozenset({S.SENT, S.SIGNED, S.COMPLETED})

SIGNED_STATES: FrozenSet[LeaseStatus] = frozenset({S.SIGNED, S.COMPLETED})

# Rejection messages keyed by (operation, current status); anything not
# listed gets a generic message.
_REJECTIONS: Dict[tuple, str] = {
    (LeaseOperation.SEND, S.DRAFT): "Lease must be generated before sending",
    (LeaseOperation.SIGN, S.DRAFT): "Lease agreement is not ready for signing",
    (LeaseOperation.SIGN, S.GENERATED): "Lease agreement is not ready for signing",
    (LeaseOperation.COMPLETE, S.DRAFT): "Lease agreement must be signed before it can be completed",
    (LeaseOperation.COMPLETE, S.GENERATED): "Lease agreement must be signed before it can be completed",
    (LeaseOperation.COMPLETE, S.SENT): "Lease agreement must be signed before it can be completed",
    (LeaseOperation.CANCEL, S.SIGNED): "Lease agreement is already signed",
}


class LeaseTransitionError(Exception):
    def __init__(self, operation: LeaseOperation, status: LeaseStatus, message: str):
        super().__init__(message)
        self.operation = operation
        self.status = status
        self.message = message


def rejection_message(operation: LeaseOperation, status: LeaseStatus) -> str:
    if (operation, status) in _REJECTIONS:
        return _REJECTIONS[(operation, status)]
    if status == S.CANCELLED:
        return "Lease agreement has been cancelled"
    if status in SIGNED_STATES:
        if status == S.COMPLETED and operation == LeaseOperation.COMPLETE:
            return "Lease agreement is already completed"
        return "Lease agreement is already signed"
    return f"Cannot {operation.value} a lease agreement in status '{status.value}'"


def can_apply(status: LeaseStatus, operation: LeaseOperation, privileged: bool = False) -> bool:
    transition = TRANSITIONS[operation]
    if status in transition.sources:
        return True
    return privileged and status in transition.privileged_sources


def next_status(status: LeaseStatus, operation: LeaseOperation, privileged: bool = False) -> LeaseStatus:
    """Target status for *operation*, or LeaseTransitionError when not allowed."""
    if not can_apply(status, operation, privileged):
        raise LeaseTransitionError(operation, status, rejection_message(operation, status))
    return TRANSITIONS[operation].target


def apply(lease: LeaseAgreement, operation: LeaseOperation, privileged: bool = False) -> LeaseStatus:
    """Move *lease* along the table; the caller persists it."""
    current = lease.status
    target = next_status(current, operation, privileged)
    lease.status = target
    logger.info(
        f"[LEASE][STATE] Lease {lease.id}: {current.value} -> {target.value} ({operation.value})"
    )
    return target


def is_tenant_visible(status: LeaseStatus) -> bool:
    return status in TENANT_VISIBLE_STATES


def is_terminal(status: Optional[LeaseStatus]) -> bool:
    return status in TERMINAL_STATES
