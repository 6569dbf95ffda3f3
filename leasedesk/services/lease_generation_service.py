"""
Lease Generation Service
Drives a lease from Draft to a signed, downloadable document:

  generate_lease_html    template + lease -> HTML            (-> Generated)
  generate_lease_pdf     HTML -> stored PDF (three-tier chain)
  send_lease_to_tenant   dispatch + notification             (-> Sent)
  sign_lease             signature capture, hash, re-render  (-> Signed)
  download_signed_lease  signed document bytes

Every public method returns a ServiceResult and runs in its own transaction.
"""
import base64
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from sqlalchemy.orm import Session

from leasedesk.core.actor import Actor
from leasedesk.core.clock import Clock, SystemClock
from leasedesk.core.config import Settings, get_settings
from leasedesk.core.result import ErrorKind, ServiceResult
from leasedesk.models.lease import DigitalSignature, LeaseAgreement, LeaseStatus, LeaseTemplate
from leasedesk.repositories.base import SqlAlchemyRepository
from leasedesk.schemas.lease import (
    DigitalSignatureOut,
    GenerateLeaseRequest,
    GeneratedLease,
    LeaseSigningView,
    LeaseStatusInfo,
    SignLeaseRequest,
)
from leasedesk.services import lease_state
from leasedesk.services.access_gate import AccessGate, LeaseAccess
from leasedesk.services.base import service_operation
from leasedesk.services.document_generator import DocumentGenerator, RenderedDocument
from leasedesk.services.lease_state import LeaseOperation
from leasedesk.services.notifier import LeaseNotifier, LoggingNotifier
from leasedesk.services.signature import (
    SignaturePayloadError,
    compute_signature_hash,
    decode_signature_payload,
    embed_signature,
    hashes_match,
    mime_type_for_path,
    signature_block,
)
from leasedesk.services.template_renderer import TemplateRenderer
from leasedesk.services.template_store import LeaseTemplateService
from leasedesk.storage.blob import BlobStorage, StorageError, normalize_key

logger = logging.getLogger(__name__)

LEASE_NOT_FOUND = "Lease agreement not found"
TEMPLATE_NOT_FOUND = "Lease template not found"
FILE_STAMP_FORMAT = "%Y%m%d%H%M%S"

_STATUS_MESSAGES = {
    LeaseStatus.DRAFT: "Lease agreement is in draft. Generate the lease document to continue.",
    LeaseStatus.GENERATED: "Lease document has been generated. Send it to the tenant for signing.",
    LeaseStatus.SENT: "Lease agreement has been sent to the tenant and is awaiting signature.",
    LeaseStatus.SIGNED: "Lease agreement has been signed by the tenant.",
    LeaseStatus.COMPLETED: "Lease agreement is complete.",
    LeaseStatus.CANCELLED: "Lease agreement has been cancelled.",
}


class LeaseGenerationService:

    def __init__(
        self,
        db: Session,
        storage: BlobStorage,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
        generator: Optional[DocumentGenerator] = None,
        renderer: Optional[TemplateRenderer] = None,
        notifier: Optional[LeaseNotifier] = None,
        templates: Optional[LeaseTemplateService] = None,
        gate: Optional[AccessGate] = None,
    ):
        self.db = db
        self.storage = storage
        self.settings = settings or get_settings()
        self.clock = clock or SystemClock()
        self.generator = generator or DocumentGenerator.from_settings(self.settings)
        self.renderer = renderer or TemplateRenderer(self.settings, self.clock)
        self.notifier = notifier or LoggingNotifier()
        self.templates = templates or LeaseTemplateService(db, self.settings, self.clock)
        self.gate = gate or AccessGate()

        self.leases = SqlAlchemyRepository(db, LeaseAgreement)
        self.signatures = SqlAlchemyRepository(db, DigitalSignature)

    # ─────────────────────── Generation ───────────────────────

    @service_operation("generating lease HTML")
    def generate_lease_html(self, lease_id: int, template_id: Optional[int] = None) -> ServiceResult[str]:
        lease = self.leases.get(lease_id)
        if lease is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, LEASE_NOT_FOUND)

        template = self._template_for(template_id)
        if template is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, TEMPLATE_NOT_FOUND)

        return ServiceResult.ok(self._render_html(lease, template))

    @service_operation("generating lease PDF")
    def generate_lease_pdf(self, lease_id: int, html_content: Optional[str] = None) -> ServiceResult[str]:
        """Render *html_content* (default: the lease's stored HTML) and store it; data is the storage key."""
        lease = self.leases.get(lease_id)
        if lease is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, LEASE_NOT_FOUND)

        html = html_content if html_content is not None else lease.generated_html_content
        if html is None:
            return ServiceResult.fail(
                ErrorKind.INVALID_STATE, "Lease agreement has no generated content to convert"
            )

        path, warnings = self._store_document(lease, html, initial=True)
        return ServiceResult.ok(path, warnings=warnings)

    @service_operation("generating lease")
    def generate_lease(
        self, request: Union[GenerateLeaseRequest, Dict[str, Any]]
    ) -> ServiceResult[GeneratedLease]:
        """Render, optionally store the PDF and optionally dispatch, in one transaction."""
        req = request if isinstance(request, GenerateLeaseRequest) else GenerateLeaseRequest.model_validate(request)

        lease = self.leases.get(req.lease_agreement_id)
        if lease is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, LEASE_NOT_FOUND)

        template = self._template_for(req.lease_template_id)
        if template is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, TEMPLATE_NOT_FOUND)

        html = self._render_html(lease, template)
        warnings: List[str] = []

        pdf_path: Optional[str] = None
        if req.generate_pdf:
            pdf_path, pdf_warnings = self._store_document(lease, html, initial=True)
            warnings.extend(pdf_warnings)

        if req.send_to_tenant:
            warnings.extend(self._dispatch(lease))

        return ServiceResult.ok(
            GeneratedLease(
                lease_agreement_id=lease.id,
                status=lease.status,
                lease_template_id=lease.lease_template_id,
                html_content=html,
                pdf_path=pdf_path,
                sent=req.send_to_tenant,
            ),
            warnings=warnings,
        )

    # ─────────────────────── Dispatch ───────────────────────

    @service_operation("sending lease")
    def send_lease_to_tenant(self, lease_id: int) -> ServiceResult[LeaseAgreement]:
        lease = self.leases.get(lease_id)
        if lease is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, LEASE_NOT_FOUND)

        warnings = self._dispatch(lease)
        return ServiceResult.ok(lease, warnings=warnings)

    # ─────────────────────── Tenant-facing ───────────────────────

    @service_operation("retrieving lease for signing")
    def get_lease_for_signing(self, lease_id: int, actor: Actor) -> ServiceResult[LeaseSigningView]:
        lease = self.leases.get(lease_id)
        if lease is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, LEASE_NOT_FOUND)

        allowed = self.gate.gate(lease, actor, LeaseAccess.VIEW)
        if not allowed:
            return ServiceResult.fail(allowed.error_kind, allowed.error_message)

        signatures = self.signatures.query(
            DigitalSignature.lease_agreement_id == lease.id,
            order_by=DigitalSignature.signed_date,
        )
        view = LeaseSigningView(
            lease_agreement_id=lease.id,
            tenant_name=lease.tenant.full_name if lease.tenant else "",
            room_number=lease.room.number if lease.room else "",
            start_date=lease.start_date,
            end_date=lease.end_date,
            rent_amount=lease.rent_amount,
            expected_rent_day=lease.expected_rent_day,
            generated_html_content=lease.generated_html_content,
            generated_pdf_path=lease.generated_pdf_path,
            status=lease.status,
            requires_signature=lease.requires_signature,
            is_signed=lease.is_signed,
            signed_at=lease.signed_at,
            signatures=[DigitalSignatureOut.model_validate(s) for s in signatures],
        )
        return ServiceResult.ok(view)

    @service_operation("signing lease")
    def sign_lease(
        self, request: Union[SignLeaseRequest, Dict[str, Any]], actor: Actor
    ) -> ServiceResult[DigitalSignature]:
        req = request if isinstance(request, SignLeaseRequest) else SignLeaseRequest.model_validate(request)

        lease = self.leases.get(req.lease_agreement_id)
        if lease is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, LEASE_NOT_FOUND)

        allowed = self.gate.authorize(lease, actor)
        if not allowed:
            return ServiceResult.fail(allowed.error_kind, allowed.error_message)

        existing = self.signatures.first(DigitalSignature.lease_agreement_id == lease.id)
        if existing is not None:
            return ServiceResult.fail(ErrorKind.INVALID_STATE, "Lease agreement is already signed")

        ready = self.gate.check_ready(lease, actor, LeaseAccess.SIGN)
        if not ready:
            return ServiceResult.fail(ready.error_kind, ready.error_message)
        if not lease_state.can_apply(lease.status, LeaseOperation.SIGN, privileged=actor.is_administrator):
            return ServiceResult.fail(
                ErrorKind.INVALID_STATE, lease_state.rejection_message(LeaseOperation.SIGN, lease.status)
            )

        try:
            image = decode_signature_payload(req.signature_data_url)
        except SignaturePayloadError as exc:
            return ServiceResult.fail(ErrorKind.VALIDATION_FAILURE, str(exc))

        signed_at = self.clock.now_utc()
        stamp = self.clock.now_local().strftime(FILE_STAMP_FORMAT)
        image_path = normalize_key(
            f"{self.settings.signatures_prefix}/signature_{lease.id}_{stamp}.{image.extension}"
        )

        signature = DigitalSignature(
            lease=lease,
            tenant_id=lease.tenant_id,
            signed_date=signed_at,
            signature_image_path=image_path,
            signer_ip_address=req.signer_ip_address,
            signer_user_agent=req.signer_user_agent,
            signing_notes=req.signing_notes,
            signature_hash=compute_signature_hash(lease.id, req.signer_ip_address, signed_at, image.data),
            is_verified=True,
            created_at=signed_at,
            updated_at=signed_at,
        )
        # Flush first: a concurrent signer hits the unique index before any blob is written
        self.signatures.add(signature)
        self.storage.write_bytes(image_path, image.data)

        lease_state.apply(lease, LeaseOperation.SIGN, privileged=actor.is_administrator)
        lease.is_signed = True
        lease.signed_at = signed_at
        lease.last_modified_at = signed_at
        lease.touch(signed_at)
        self.leases.update(lease)

        logger.info(f"[LEASE][SIGN] Lease {lease.id} signed by tenant {lease.tenant_id} from {req.signer_ip_address}")

        warnings = self._store_signed_document(lease, signature)
        warning = self._notify(self.notifier.lease_signed, lease, signature)
        if warning:
            warnings.append(warning)

        return ServiceResult.ok(signature, warnings=warnings)

    @service_operation("downloading signed lease")
    def download_signed_lease(self, lease_id: int, actor: Actor) -> ServiceResult[bytes]:
        lease = self.leases.get(lease_id)
        if lease is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, LEASE_NOT_FOUND)

        allowed = self.gate.gate(lease, actor, LeaseAccess.DOWNLOAD)
        if not allowed:
            return ServiceResult.fail(allowed.error_kind, allowed.error_message)

        path = lease.generated_pdf_path
        if not path or not self.storage.exists(path):
            return ServiceResult.fail(ErrorKind.NOT_FOUND, "Signed lease document not found")

        return ServiceResult.ok(self.storage.read_bytes(path))

    # ─────────────────────── Verification & lifecycle ───────────────────────

    @service_operation("verifying signature")
    def verify_signature(self, lease_id: int) -> ServiceResult[bool]:
        """Recompute the hash from the stored record and image; updates is_verified."""
        lease = self.leases.get(lease_id)
        if lease is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, LEASE_NOT_FOUND)

        signature = self.signatures.first(DigitalSignature.lease_agreement_id == lease.id)
        if signature is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, "Digital signature not found")

        warnings: List[str] = []
        try:
            image = self.storage.read_bytes(signature.signature_image_path)
        except StorageError as exc:
            logger.warning(f"[LEASE][SIGN] Lease {lease.id}: signature image unreadable: {exc}")
            warnings.append("Signature image could not be read")
            verified = False
        else:
            expected = compute_signature_hash(
                lease.id, signature.signer_ip_address, signature.signed_date, image
            )
            verified = hashes_match(expected, signature.signature_hash)

        signature.is_verified = verified
        signature.updated_at = self.clock.now_utc()
        self.signatures.update(signature)

        if not verified:
            logger.warning(f"[LEASE][SIGN] Lease {lease.id}: signature failed verification")
        return ServiceResult.ok(verified, warnings=warnings)

    @service_operation("completing lease")
    def complete_lease(self, lease_id: int) -> ServiceResult[LeaseAgreement]:
        return self._transition(lease_id, LeaseOperation.COMPLETE)

    @service_operation("cancelling lease")
    def cancel_lease(self, lease_id: int) -> ServiceResult[LeaseAgreement]:
        return self._transition(lease_id, LeaseOperation.CANCEL)

    @service_operation("retrieving lease status")
    def describe_status(self, lease_id: int) -> ServiceResult[LeaseStatusInfo]:
        lease = self.leases.get(lease_id)
        if lease is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, LEASE_NOT_FOUND)

        warnings: List[str] = []
        if lease.status == LeaseStatus.SENT and not lease.generated_html_content:
            warnings.append("Lease agreement is marked as sent but has no generated content")
        if lease.is_signed and not lease.generated_pdf_path:
            warnings.append("Signed lease document is missing")

        info = LeaseStatusInfo(
            lease_agreement_id=lease.id,
            status=lease.status,
            message=_STATUS_MESSAGES[lease.status],
            has_document=bool(lease.generated_pdf_path),
            warnings=warnings,
        )
        return ServiceResult.ok(info, warnings=warnings)

    # ─────────────────────── Internals ───────────────────────

    def _template_for(self, template_id: Optional[int]) -> Optional[LeaseTemplate]:
        if template_id is None:
            return self.templates.resolve_default()
        return self.templates.templates.get(template_id)

    def _render_html(self, lease: LeaseAgreement, template: LeaseTemplate) -> str:
        lease_state.apply(lease, LeaseOperation.RENDER)

        html = self.renderer.render(lease, template.html_content)
        now = self.clock.now_utc()
        lease.generated_html_content = html
        lease.lease_template_id = template.id
        lease.generated_at = now
        lease.last_modified_at = now
        lease.touch(now)
        self.leases.update(lease)

        logger.info(f"[LEASE][RENDER] Lease {lease.id} rendered with template {template.id}")
        return html

    def _write_document(self, lease: LeaseAgreement, document: RenderedDocument) -> str:
        stamp = self.clock.now_local().strftime(FILE_STAMP_FORMAT)
        path = self.storage.write_bytes(
            f"{self.settings.leases_prefix}/lease_{lease.id}_{stamp}.pdf", document.content
        )
        lease.generated_pdf_path = path
        now = self.clock.now_utc()
        lease.last_modified_at = now
        lease.touch(now)
        self.leases.update(lease)
        logger.info(
            f"[LEASE][PDF] Lease {lease.id}: stored {len(document.content)} bytes at {path} "
            f"({document.renderer})"
        )
        return path

    def _store_document(self, lease: LeaseAgreement, html: str, initial: bool) -> Tuple[str, List[str]]:
        document = self.generator.render_document(html)
        path = self._write_document(lease, document)

        warnings: List[str] = []
        if document.degraded:
            failures = "; ".join(document.warnings) or "primary renderer unavailable"
            prefix = "PDF generation failed" if initial else "Signed document generation degraded"
            warnings.append(f"{prefix}: used {document.tier.value} output ({failures})")
        return path, warnings

    def _store_signed_document(self, lease: LeaseAgreement, signature: DigitalSignature) -> List[str]:
        """Embed the signature into the lease HTML and re-run the generator; failures become warnings."""
        base_html = lease.generated_html_content
        if base_html is None:
            template = lease.template or self.templates.resolve_default()
            base_html = self.renderer.render(lease, template.html_content)

        image_url: Optional[str] = None
        try:
            image = self.storage.read_bytes(signature.signature_image_path)
            image_url = (
                f"data:{mime_type_for_path(signature.signature_image_path)};base64,"
                f"{base64.b64encode(image).decode('ascii')}"
            )
        except StorageError as exc:
            logger.warning(f"[LEASE][SIGN] Lease {lease.id}: signature image not embedded: {exc}")

        signer = lease.tenant.full_name if lease.tenant else "Tenant"
        signed_html = embed_signature(base_html, signature_block(signature, image_url, signer))
        lease.generated_html_content = signed_html

        try:
            _, warnings = self._store_document(lease, signed_html, initial=False)
        except StorageError as exc:
            logger.error(f"[LEASE][PDF] Lease {lease.id}: signed document not stored: {exc}")
            self.leases.update(lease)
            return [f"Lease signed but the signed document could not be stored: {exc}"]
        return warnings

    def _dispatch(self, lease: LeaseAgreement) -> List[str]:
        lease_state.apply(lease, LeaseOperation.SEND)
        now = self.clock.now_utc()
        lease.sent_at = now
        lease.last_modified_at = now
        lease.touch(now)
        self.leases.update(lease)
        logger.info(f"[LEASE][SEND] Lease {lease.id} sent to tenant {lease.tenant_id}")

        warning = self._notify(self.notifier.lease_sent, lease)
        return [warning] if warning else []

    def _notify(self, hook: Callable[..., None], *args: Any) -> Optional[str]:
        """Notifications never undo the state change that triggered them."""
        try:
            hook(*args)
        except Exception as exc:
            logger.error(f"[LEASE][EMAIL] {hook.__name__} failed: {exc}")
            return f"Notification could not be delivered: {exc}"
        return None

    def _transition(self, lease_id: int, operation: LeaseOperation) -> ServiceResult[LeaseAgreement]:
        lease = self.leases.get(lease_id)
        if lease is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, LEASE_NOT_FOUND)

        lease_state.apply(lease, operation)
        now = self.clock.now_utc()
        lease.last_modified_at = now
        lease.touch(now)
        self.leases.update(lease)
        return ServiceResult.ok(lease)

