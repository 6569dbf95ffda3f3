# Import all models in dependency order so string relationships resolve
from leasedesk.models.tenant import Tenant
from leasedesk.models.room import Room
from leasedesk.models.lease import (
    DigitalSignature,
    LeaseAgreement,
    LeaseStatus,
    LeaseTemplate,
)

__all__ = [
    "Tenant",
    "Room",
    "LeaseAgreement",
    "LeaseStatus",
    "LeaseTemplate",
    "DigitalSignature",
]
