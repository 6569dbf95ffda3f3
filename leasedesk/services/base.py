"""
Transaction boundary for public lease-engine operations.

@service_operation wraps a method of a service holding ``self.db``: the
session is committed when the method returns a successful ServiceResult and
rolled back otherwise. Exceptions never leave the wrapper; they come back as
failed results.
"""
import logging
from functools import wraps
from typing import Any, Callable, TypeVar, cast

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from leasedesk.core.result import ErrorKind, ServiceResult
from leasedesk.services.lease_state import LeaseTransitionError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., ServiceResult])


def _validation_messages(exc: ValidationError) -> list:
    return [
        f"{'.'.join(str(part) for part in err['loc']) or 'value'}: {err['msg']}"
        for err in exc.errors()
    ]


def service_operation(description: str):
    """
    Args:
        description: phrase used in failure messages, e.g. "signing lease"
                     produces "Error signing lease: <detail>".
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(self, *args: Any, **kwargs: Any) -> ServiceResult:
            db = self.db
            try:
                result = func(self, *args, **kwargs)
            except LeaseTransitionError as exc:
                db.rollback()
                return ServiceResult.fail(ErrorKind.INVALID_STATE, exc.message)
            except ValidationError as exc:
                db.rollback()
                messages = _validation_messages(exc)
                return ServiceResult.fail(ErrorKind.VALIDATION_FAILURE, "; ".join(messages), messages)
            except IntegrityError as exc:
                db.rollback()
                logger.warning(f"[LEASE] Integrity conflict while {description}: {exc.orig}")
                return ServiceResult.fail(
                    ErrorKind.INVALID_STATE, f"Error {description}: conflicting concurrent change"
                )
            except StaleDataError as exc:
                db.rollback()
                logger.warning(f"[LEASE] Stale row while {description}: {exc}")
                return ServiceResult.fail(
                    ErrorKind.INVALID_STATE,
                    f"Error {description}: lease agreement was modified concurrently",
                )
            except Exception as exc:
                db.rollback()
                logger.exception(f"[LEASE] Error {description}")
                return ServiceResult.fail(ErrorKind.EXTERNAL_FAILURE, f"Error {description}: {exc}")

            if result.success:
                try:
                    db.commit()
                except (IntegrityError, StaleDataError) as exc:
                    db.rollback()
                    logger.warning(f"[LEASE] Commit conflict while {description}: {exc}")
                    return ServiceResult.fail(
                        ErrorKind.INVALID_STATE, f"Error {description}: conflicting concurrent change"
                    )
            else:
                db.rollback()
            return result

        return cast(F, wrapper)

    return decorator
