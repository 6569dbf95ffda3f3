from leasedesk.core.actor import ADMINISTRATOR, tenant
from leasedesk.core.result import ErrorKind
from leasedesk.models import LeaseAgreement, LeaseStatus
from leasedesk.services.document_generator import DocumentGenerator, MINIMAL_PDF, TextPdfRenderer
from leasedesk.services.lease_generation_service import LeaseGenerationService
from leasedesk.services.notifier import LeaseNotifier

from conftest import LEASE_ID, OTHER_TENANT_ID, TENANT_ID, STUB_PDF, StubPrimaryRenderer


class RecordingNotifier(LeaseNotifier):
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []
        self.signed = []

    def lease_sent(self, lease):
        if self.fail:
            raise RuntimeError("smtp down")
        self.sent.append(lease.id)

    def lease_signed(self, lease, signature):
        self.signed.append((lease.id, signature.id))


# ─────────────────────── Rendering ───────────────────────

def test_render_scenario_moves_lease_to_generated(service, lease):
    result = service.generate_lease_html(LEASE_ID)

    assert result.success
    assert "5th" in result.data
    assert "R1,200.00" in result.data
    assert "12 months" in result.data
    assert lease.status == LeaseStatus.GENERATED
    assert lease.generated_html_content == result.data
    assert lease.lease_template_id is not None
    assert lease.generated_at is not None


def test_render_with_explicit_template(service, templates, lease):
    template = templates.create_template(
        {"name": "Short", "html_content": "<body>{{TenantName}} owes {{RentAmount}} {{Unknown}}</body>"}
    ).data

    result = service.generate_lease_html(LEASE_ID, template.id)

    assert result.data == "<body>Thandi Mokoena owes R1,200.00 {{Unknown}}</body>"
    assert lease.lease_template_id == template.id


def test_render_unknown_lease_or_template(service, lease):
    assert service.generate_lease_html(999).error_kind == ErrorKind.NOT_FOUND

    result = service.generate_lease_html(LEASE_ID, 999)
    assert result.error_kind == ErrorKind.NOT_FOUND
    assert result.error_message == "Lease template not found"
    assert lease.status == LeaseStatus.DRAFT


def test_pdf_is_stored_under_leases_prefix(service, storage, lease):
    service.generate_lease_html(LEASE_ID)

    result = service.generate_lease_pdf(LEASE_ID)

    assert result.success
    assert result.warnings == []
    assert result.data == "leases/lease_1_20240110093000.pdf"
    assert lease.generated_pdf_path == result.data
    assert storage.read_bytes(result.data) == STUB_PDF


def test_degraded_pdf_is_success_with_warning(db, storage, settings, clock, lease):
    generator = DocumentGenerator([StubPrimaryRenderer(fail=True), TextPdfRenderer()])
    service = LeaseGenerationService(db, storage, settings=settings, clock=clock, generator=generator)
    service.generate_lease_html(LEASE_ID)

    result = service.generate_lease_pdf(LEASE_ID)

    assert result.success
    assert result.degraded
    assert result.warnings[0].startswith("PDF generation failed")
    assert storage.read_bytes(result.data).startswith(b"%PDF")


def test_pdf_without_any_html_is_rejected(service, lease):
    result = service.generate_lease_pdf(LEASE_ID)
    assert result.error_kind == ErrorKind.INVALID_STATE


def test_generate_lease_one_shot(service, storage, lease):
    result = service.generate_lease({"lease_agreement_id": LEASE_ID, "send_to_tenant": True})

    assert result.success
    assert result.data.status == LeaseStatus.SENT
    assert result.data.sent
    assert storage.exists(result.data.pdf_path)
    assert lease.sent_at is not None


def test_generate_lease_without_pdf(service, storage, lease):
    result = service.generate_lease({"lease_agreement_id": LEASE_ID, "generate_pdf": False})

    assert result.data.pdf_path is None
    assert result.data.status == LeaseStatus.GENERATED
    assert storage.blobs == {}


# ─────────────────────── Dispatch ───────────────────────

def test_send_from_draft_fails(service, lease):
    result = service.send_lease_to_tenant(LEASE_ID)

    assert not result.success
    assert result.error_kind == ErrorKind.INVALID_STATE
    assert "must be generated before sending" in result.error_message
    assert lease.status == LeaseStatus.DRAFT


def test_send_notifies_tenant(db, storage, settings, clock, generator, lease):
    notifier = RecordingNotifier()
    service = LeaseGenerationService(db, storage, settings=settings, clock=clock, generator=generator, notifier=notifier)
    service.generate_lease_html(LEASE_ID)

    result = service.send_lease_to_tenant(LEASE_ID)

    assert result.success
    assert lease.status == LeaseStatus.SENT
    assert notifier.sent == [LEASE_ID]


def test_notification_failure_does_not_undo_dispatch(db, storage, settings, clock, generator, lease):
    service = LeaseGenerationService(
        db, storage, settings=settings, clock=clock, generator=generator, notifier=RecordingNotifier(fail=True)
    )
    service.generate_lease_html(LEASE_ID)

    result = service.send_lease_to_tenant(LEASE_ID)

    assert result.success
    assert lease.status == LeaseStatus.SENT
    assert "smtp down" in result.warnings[0]


# ─────────────────────── Lifecycle ───────────────────────

def test_complete_requires_signature(service, sent_lease):
    result = service.complete_lease(LEASE_ID)
    assert result.error_kind == ErrorKind.INVALID_STATE
    assert sent_lease.status == LeaseStatus.SENT


def test_cancel_then_render_is_rejected(service, sent_lease):
    assert service.cancel_lease(LEASE_ID).data.status == LeaseStatus.CANCELLED

    result = service.generate_lease_html(LEASE_ID)

    assert result.error_kind == ErrorKind.INVALID_STATE
    assert sent_lease.status == LeaseStatus.CANCELLED


def test_describe_status(service, lease):
    info = service.describe_status(LEASE_ID).data
    assert info.status == LeaseStatus.DRAFT
    assert not info.has_document
    assert "draft" in info.message


def test_describe_status_flags_sent_lease_without_content(service, db, lease):
    lease.status = LeaseStatus.SENT
    db.commit()

    result = service.describe_status(LEASE_ID)

    assert result.data.warnings == ["Lease agreement is marked as sent but has no generated content"]


# ─────────────────────── Viewing ───────────────────────

def test_owner_sees_sent_lease(service, sent_lease):
    view = service.get_lease_for_signing(LEASE_ID, tenant(TENANT_ID)).data

    assert view.tenant_name == "Thandi Mokoena"
    assert view.room_number == "B12"
    assert view.status == LeaseStatus.SENT
    assert not view.is_signed
    assert view.signatures == []


def test_tenant_cannot_view_unsent_lease_but_admin_can(service, lease):
    service.generate_lease_html(LEASE_ID)

    assert service.get_lease_for_signing(LEASE_ID, tenant(TENANT_ID)).error_kind == ErrorKind.INVALID_STATE
    assert service.get_lease_for_signing(LEASE_ID, ADMINISTRATOR).success


def test_other_tenant_cannot_view(service, sent_lease):
    result = service.get_lease_for_signing(LEASE_ID, tenant(OTHER_TENANT_ID))
    assert result.error_kind == ErrorKind.UNAUTHORIZED


def test_lease_is_loaded_fresh_from_store(service, db, sent_lease):
    db.expire_all()
    assert db.get(LeaseAgreement, LEASE_ID).status == LeaseStatus.SENT


def test_minimal_pdf_constant_used_when_every_tier_fails(db, storage, settings, clock, lease):
    generator = DocumentGenerator([StubPrimaryRenderer(fail=True)])
    service = LeaseGenerationService(db, storage, settings=settings, clock=clock, generator=generator)
    service.generate_lease_html(LEASE_ID)

    result = service.generate_lease_pdf(LEASE_ID)

    assert storage.read_bytes(result.data) == MINIMAL_PDF
    assert "minimal_fallback" in result.warnings[0]


def test_audit_columns_follow_the_injected_clock(service, clock, lease):
    rendered_at = clock.now_utc()
    service.generate_lease_html(LEASE_ID)
    assert lease.created_at == rendered_at
    assert lease.updated_at == rendered_at

    clock.advance(hours=2)
    service.cancel_lease(LEASE_ID)

    assert lease.created_at == rendered_at
    assert lease.updated_at == clock.now_utc()
    assert lease.last_modified_at == lease.updated_at
