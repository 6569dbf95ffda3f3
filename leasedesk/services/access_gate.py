"""
Access Gate
Decides whether an actor may view, sign or download a lease.

Tenants must own the lease. Administrators bypass ownership and the view
and sign readiness checks so managers can preview at any stage; downloading
the signed document still needs a signed lease for everyone.
"""
import logging
from enum import Enum
from typing import Optional

from leasedesk.core.actor import Actor, AdministratorActor, TenantActor
from leasedesk.core.result import ErrorKind, ServiceResult
from leasedesk.models.lease import LeaseAgreement
from leasedesk.services import lease_state

logger = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "Unauthorized access to lease agreement"


class LeaseAccess(str, Enum):
    VIEW = "view"
    SIGN = "sign"
    DOWNLOAD = "download"


class AccessGate:

    def authorize(self, lease: LeaseAgreement, actor: Actor) -> ServiceResult[None]:
        """Ownership check only."""
        if isinstance(actor, AdministratorActor):
            return ServiceResult.ok()
        if isinstance(actor, TenantActor) and actor.tenant_id == lease.tenant_id:
            return ServiceResult.ok()

        logger.warning(
            f"[LEASE][ACCESS] Denied {_describe(actor)} on lease {lease.id} "
            f"(owner tenant {lease.tenant_id})"
        )
        return ServiceResult.fail(ErrorKind.UNAUTHORIZED, UNAUTHORIZED_MESSAGE)

    def check_ready(self, lease: LeaseAgreement, actor: Actor, access: LeaseAccess) -> ServiceResult[None]:
        """Status gate for an already-authorized actor."""
        if actor.is_administrator and access != LeaseAccess.DOWNLOAD:
            return ServiceResult.ok()

        message: Optional[str] = None
        if access == LeaseAccess.VIEW:
            if not lease_state.is_tenant_visible(lease.status):
                message = "Lease agreement is not ready for signing"
        elif access == LeaseAccess.SIGN:
            if not lease_state.can_apply(lease.status, lease_state.LeaseOperation.SIGN):
                message = lease_state.rejection_message(lease_state.LeaseOperation.SIGN, lease.status)
        elif access == LeaseAccess.DOWNLOAD:
            if not lease.is_signed:
                message = "Lease agreement is not signed yet"

        if message:
            return ServiceResult.fail(ErrorKind.INVALID_STATE, message)
        return ServiceResult.ok()

    def gate(self, lease: LeaseAgreement, actor: Actor, access: LeaseAccess) -> ServiceResult[None]:
        """Ownership, then readiness."""
        allowed = self.authorize(lease, actor)
        if not allowed:
            return allowed
        return self.check_ready(lease, actor, access)


def _describe(actor: Actor) -> str:
    if isinstance(actor, TenantActor):
        return f"tenant {actor.tenant_id}"
    return "administrator"
