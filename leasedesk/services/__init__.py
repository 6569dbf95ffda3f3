from leasedesk.services.access_gate import AccessGate, LeaseAccess
from leasedesk.services.document_generator import (
    ChromiumPdfRenderer,
    DocumentGenerator,
    MinimalPdfRenderer,
    PdfRenderer,
    RenderedDocument,
    RenderTier,
    TextPdfRenderer,
)
from leasedesk.services.lease_generation_service import LeaseGenerationService
from leasedesk.services.lease_state import LeaseOperation, LeaseTransitionError
from leasedesk.services.notifier import LeaseNotifier, LoggingNotifier
from leasedesk.services.template_renderer import TemplateRenderer
from leasedesk.services.template_store import LeaseTemplateService

__all__ = [
    "AccessGate",
    "LeaseAccess",
    "ChromiumPdfRenderer",
    "DocumentGenerator",
    "MinimalPdfRenderer",
    "PdfRenderer",
    "RenderedDocument",
    "RenderTier",
    "TextPdfRenderer",
    "LeaseGenerationService",
    "LeaseOperation",
    "LeaseTransitionError",
    "LeaseNotifier",
    "LoggingNotifier",
    "TemplateRenderer",
    "LeaseTemplateService",
]
