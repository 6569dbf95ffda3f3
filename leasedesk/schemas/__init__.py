from leasedesk.schemas.lease import (
    DigitalSignatureOut,
    GenerateLeaseRequest,
    GeneratedLease,
    LeaseSigningView,
    LeaseStatusInfo,
    LeaseTemplateCreate,
    LeaseTemplateOut,
    LeaseTemplateUpdate,
    SignLeaseRequest,
)

__all__ = [
    "DigitalSignatureOut",
    "GenerateLeaseRequest",
    "GeneratedLease",
    "LeaseSigningView",
    "LeaseStatusInfo",
    "LeaseTemplateCreate",
    "LeaseTemplateOut",
    "LeaseTemplateUpdate",
    "SignLeaseRequest",
]
