"""
Lease notifications.
Delivery is owned by the surrounding application; the engine only calls
these hooks after a successful dispatch or signing.
"""
import logging
from abc import ABC, abstractmethod

from leasedesk.models.lease import DigitalSignature, LeaseAgreement

logger = logging.getLogger(__name__)


class LeaseNotifier(ABC):

    @abstractmethod
    def lease_sent(self, lease: LeaseAgreement) -> None:
        ...

    @abstractmethod
    def lease_signed(self, lease: LeaseAgreement, signature: DigitalSignature) -> None:
        ...


class LoggingNotifier(LeaseNotifier):
    """Logs what would have been sent; never delivers anything."""

    def _recipient(self, lease: LeaseAgreement) -> str:
        tenant = lease.tenant
        if tenant is None:
            return f"tenant {lease.tenant_id}"
        return tenant.email or tenant.contact or tenant.full_name

    def lease_sent(self, lease: LeaseAgreement) -> None:
        logger.info(
            f"[LEASE][EMAIL] Would send signing request for lease {lease.id} to '{self._recipient(lease)}'"
        )

    def lease_signed(self, lease: LeaseAgreement, signature: DigitalSignature) -> None:
        logger.info(
            f"[LEASE][EMAIL] Would send signing confirmation for lease {lease.id} "
            f"to '{self._recipient(lease)}' (signed {signature.signed_date:%Y-%m-%d %H:%M})"
        )
