"""
Service result envelope.

Every public operation of the lease engine returns a ServiceResult instead of
raising, so the surrounding web/CRUD layer maps outcomes without try/except.
"""
from __future__ import annotations

from enum import Enum
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    INVALID_STATE = "invalid_state"
    VALIDATION_FAILURE = "validation_failure"
    EXTERNAL_FAILURE = "external_failure"


class ServiceResult(BaseModel, Generic[T]):
    """Success payload or typed error, plus non-fatal warnings."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool
    data: Optional[T] = None
    error_kind: Optional[ErrorKind] = None
    error_message: str = ""
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    @classmethod
    def ok(cls, data: Optional[T] = None, warnings: Optional[List[str]] = None) -> "ServiceResult[T]":
        return cls(success=True, data=data, warnings=list(warnings or []))

    @classmethod
    def fail(
        cls,
        kind: ErrorKind,
        message: str,
        errors: Optional[List[str]] = None,
    ) -> "ServiceResult[T]":
        return cls(
            success=False,
            error_kind=kind,
            error_message=message,
            errors=list(errors or [message]),
        )

    @property
    def degraded(self) -> bool:
        """True when the operation succeeded but had to fall back somewhere."""
        return self.success and bool(self.warnings)

    def __bool__(self) -> bool:
        return self.success
