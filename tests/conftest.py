import base64
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from leasedesk.core.clock import FixedClock
from leasedesk.core.config import Settings
from leasedesk.database import build_engine, build_session_factory, init_db
from leasedesk.models import LeaseAgreement, LeaseStatus, Room, Tenant
from leasedesk.services.document_generator import (
    DocumentGenerator,
    PdfRenderer,
    RenderError,
    RenderTier,
    TextPdfRenderer,
)
from leasedesk.services.lease_generation_service import LeaseGenerationService
from leasedesk.services.template_store import LeaseTemplateService
from leasedesk.storage.blob import InMemoryBlobStorage

TEST_DATABASE_URL = "sqlite://"

LEASE_ID = 1
TENANT_ID = 5
OTHER_TENANT_ID = 6
ROOM_ID = 9

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"signature-strokes" * 4
VALID_SIGNATURE = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")

CHROME_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

STUB_PDF = b"%PDF-1.4\n% stub primary render\n%%EOF\n"


class StubPrimaryRenderer(PdfRenderer):
    """Stands in for headless Chromium; records every HTML it was given."""

    name = "stub-primary"
    tier = RenderTier.PRIMARY

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []

    def render(self, html: str) -> bytes:
        self.calls.append(html)
        if self.fail:
            raise RenderError("browser unavailable")
        return STUB_PDF


@pytest.fixture
def settings():
    return Settings(_env_file=None, TESTING=True, PDF_PRIMARY_ENABLED=False)


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 1, 10, 9, 30, 0, tzinfo=timezone.utc))


@pytest.fixture
def storage():
    return InMemoryBlobStorage()


@pytest.fixture
def primary():
    return StubPrimaryRenderer()


@pytest.fixture
def generator(primary, settings):
    return DocumentGenerator([primary, TextPdfRenderer(settings.COMPANY_NAME, settings.PDF_FALLBACK_MAX_CHARS)])


@pytest.fixture
def db():
    engine = build_engine(TEST_DATABASE_URL)
    init_db(engine)
    session = build_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def lease(db):
    db.add_all([
        Tenant(
            id=TENANT_ID,
            full_name="Thandi Mokoena",
            contact="+27 82 555 0101",
            email="thandi@example.com",
            emergency_contact_name="Sipho Mokoena",
            emergency_contact_number="+27 82 555 0102",
        ),
        Tenant(id=OTHER_TENANT_ID, full_name="Pieter van Wyk", contact="+27 83 555 0199"),
        Room(id=ROOM_ID, number="B12", type="Single"),
    ])
    db.flush()
    agreement = LeaseAgreement(
        id=LEASE_ID,
        tenant_id=TENANT_ID,
        room_id=ROOM_ID,
        start_date=date(2024, 1, 1),
        end_date=date(2024, 12, 31),
        rent_amount=Decimal("1200"),
        expected_rent_day=5,
        status=LeaseStatus.DRAFT,
    )
    db.add(agreement)
    db.commit()
    return agreement


@pytest.fixture
def templates(db, settings, clock):
    return LeaseTemplateService(db, settings=settings, clock=clock)


@pytest.fixture
def service(db, storage, settings, clock, generator):
    return LeaseGenerationService(db, storage, settings=settings, clock=clock, generator=generator)


@pytest.fixture
def sent_lease(service, lease):
    """Lease 1 rendered, stored and dispatched."""
    result = service.generate_lease({"lease_agreement_id": LEASE_ID, "send_to_tenant": True})
    assert result.success, result.error_message
    return lease


def sign_request(**overrides):
    payload = {
        "lease_agreement_id": LEASE_ID,
        "signature_data_url": VALID_SIGNATURE,
        "signer_ip_address": "196.22.10.4",
        "signer_user_agent": CHROME_UA,
        "signing_notes": None,
    }
    payload.update(overrides)
    return payload
