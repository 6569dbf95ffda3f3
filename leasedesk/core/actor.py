"""
Caller identity for tenant-facing operations.

An actor is either a specific tenant or an administrative caller; the Access
Gate branches on the variant, never on a sentinel id.
"""
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class TenantActor(BaseModel):
    kind: Literal["tenant"] = "tenant"
    tenant_id: int

    @property
    def is_administrator(self) -> bool:
        return False


class AdministratorActor(BaseModel):
    kind: Literal["administrator"] = "administrator"
    name: str = "administrator"

    @property
    def is_administrator(self) -> bool:
        return True


Actor = Annotated[Union[TenantActor, AdministratorActor], Field(discriminator="kind")]

ADMINISTRATOR = AdministratorActor()


def tenant(tenant_id: int) -> TenantActor:
    return TenantActor(tenant_id=tenant_id)
