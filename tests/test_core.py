import logging
from datetime import date, datetime, timezone

import pytest
from pydantic import TypeAdapter
from sqlalchemy.exc import IntegrityError

from leasedesk.core.actor import Actor, AdministratorActor, TenantActor
from leasedesk.core.clock import FixedClock
from leasedesk.core.logging import configure_logging
from leasedesk.core.result import ErrorKind, ServiceResult
from leasedesk.database import build_engine, build_session_factory, init_db, session_scope
from leasedesk.models import LeaseStatus, Room
from leasedesk.services.base import service_operation
from leasedesk.services.lease_state import LeaseOperation, LeaseTransitionError


class FakeSession:
    def __init__(self):
        self.commits = 0
        self.rollbacks = 0

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1


class Operations:
    def __init__(self):
        self.db = FakeSession()

    @service_operation("doing work")
    def succeed(self):
        return ServiceResult.ok("done")

    @service_operation("doing work")
    def refuse(self):
        return ServiceResult.fail(ErrorKind.NOT_FOUND, "missing")

    @service_operation("doing work")
    def explode(self):
        raise RuntimeError("disk on fire")

    @service_operation("doing work")
    def bad_transition(self):
        raise LeaseTransitionError(LeaseOperation.SEND, LeaseStatus.DRAFT, "Lease must be generated before sending")

    @service_operation("doing work")
    def conflict(self):
        raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))


def test_success_commits():
    ops = Operations()
    result = ops.succeed()
    assert result.success and result.data == "done"
    assert (ops.db.commits, ops.db.rollbacks) == (1, 0)


def test_failed_result_rolls_back():
    ops = Operations()
    result = ops.refuse()
    assert result.error_kind == ErrorKind.NOT_FOUND
    assert (ops.db.commits, ops.db.rollbacks) == (0, 1)


def test_unexpected_exception_becomes_external_failure():
    ops = Operations()
    result = ops.explode()
    assert result.error_kind == ErrorKind.EXTERNAL_FAILURE
    assert result.error_message == "Error doing work: disk on fire"
    assert ops.db.rollbacks == 1


def test_transition_error_becomes_invalid_state():
    result = Operations().bad_transition()
    assert result.error_kind == ErrorKind.INVALID_STATE
    assert result.error_message == "Lease must be generated before sending"


def test_integrity_error_becomes_invalid_state():
    result = Operations().conflict()
    assert result.error_kind == ErrorKind.INVALID_STATE


def test_result_truthiness_and_degraded():
    assert ServiceResult.ok(1)
    assert not ServiceResult.fail(ErrorKind.UNAUTHORIZED, "no")
    assert ServiceResult.ok(1, warnings=["fallback"]).degraded
    assert ServiceResult.fail(ErrorKind.UNAUTHORIZED, "no").errors == ["no"]


def test_actor_union_is_discriminated():
    adapter = TypeAdapter(Actor)
    assert isinstance(adapter.validate_python({"kind": "tenant", "tenant_id": 5}), TenantActor)
    assert isinstance(adapter.validate_python({"kind": "administrator"}), AdministratorActor)


def test_fixed_clock_advances():
    clock = FixedClock(datetime(2024, 1, 10, 9, 30))
    assert clock.now_utc().tzinfo == timezone.utc
    clock.advance(minutes=5)
    assert clock.now_utc() == datetime(2024, 1, 10, 9, 35, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "today, expected",
    [
        (date(2024, 3, 1), date(2024, 3, 5)),
        (date(2024, 3, 5), date(2024, 3, 5)),
        (date(2024, 3, 6), date(2024, 4, 5)),
        (date(2024, 12, 20), None),
        (date(2023, 11, 20), date(2024, 1, 1)),
        (date(2025, 1, 1), None),
    ],
)
def test_rent_due_date(lease, today, expected):
    assert lease.rent_due_date(today) == expected


def test_rent_due_day_clamped_to_month_length(lease):
    lease.expected_rent_day = 31
    assert lease.rent_due_date(date(2024, 2, 10)) == date(2024, 2, 29)


def test_session_scope_yields_working_session():
    engine = build_engine("sqlite://")
    init_db(engine)
    scope = session_scope(build_session_factory(engine))

    session = next(scope)
    session.add(Room(id=1, number="A1"))
    session.commit()
    assert session.get(Room, 1).number == "A1"

    with pytest.raises(StopIteration):
        next(scope)
    engine.dispose()


def test_configure_logging_sets_package_level():
    configure_logging("debug")
    assert logging.getLogger("leasedesk").level == logging.DEBUG
    configure_logging("WARNING")
    assert logging.getLogger("leasedesk").level == logging.WARNING
