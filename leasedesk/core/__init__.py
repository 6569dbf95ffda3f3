from leasedesk.core.actor import ADMINISTRATOR, Actor, AdministratorActor, TenantActor, tenant
from leasedesk.core.clock import Clock, FixedClock, SystemClock
from leasedesk.core.config import Settings, get_settings
from leasedesk.core.result import ErrorKind, ServiceResult

__all__ = [
    "ADMINISTRATOR",
    "Actor",
    "AdministratorActor",
    "TenantActor",
    "tenant",
    "Clock",
    "FixedClock",
    "SystemClock",
    "Settings",
    "get_settings",
    "ErrorKind",
    "ServiceResult",
]
