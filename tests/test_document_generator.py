import re

import pytest

from conftest import STUB_PDF, StubPrimaryRenderer
from leasedesk.core.config import Settings
from leasedesk.services.document_generator import (
    MINIMAL_PDF,
    TRUNCATION_NOTICE,
    ChromiumPdfRenderer,
    DocumentGenerator,
    MinimalPdfRenderer,
    RenderTier,
    TextPdfRenderer,
    html_to_text,
)

AWKWARD_INPUTS = [
    "",
    "<html><body><div><p>unclosed",
    "<<<>>> &&& </body></html></html>",
    "<style>body { color: red }</style><script>alert(1)</script>",
    "Ünïcødé ✓ “quoted” text",
    "x" * 50000,
]


def test_html_to_text_strips_markup_and_entities():
    html = "<html><head><style>p{color:red}</style></head><body><h1>Lease</h1>\n<p>Rent&nbsp;&amp; terms</p></body></html>"
    assert html_to_text(html) == "Lease Rent & terms"


def test_html_to_text_truncates_with_notice():
    text = html_to_text("<p>" + "a" * 3000 + "</p>", max_chars=100)
    assert text == "a" * 100 + TRUNCATION_NOTICE


def test_minimal_pdf_has_valid_xref():
    assert MINIMAL_PDF.startswith(b"%PDF-1.4")
    assert MINIMAL_PDF.endswith(b"%%EOF\n")
    offset = int(re.search(rb"startxref\n(\d+)\n", MINIMAL_PDF).group(1))
    assert MINIMAL_PDF[offset:offset + 4] == b"xref"
    assert MinimalPdfRenderer().render("anything") == MINIMAL_PDF


def test_text_renderer_produces_pdf():
    content = TextPdfRenderer("Acme Lettings").render("<h1>Lease</h1><p>Body text</p>")
    assert content.startswith(b"%PDF")
    assert b"ACME LETTINGS" in content


def test_primary_output_is_used_when_it_succeeds():
    primary = StubPrimaryRenderer()
    document = DocumentGenerator([primary, TextPdfRenderer()]).render_document("<p>hi</p>")

    assert document.content == STUB_PDF
    assert document.tier == RenderTier.PRIMARY
    assert not document.degraded
    assert primary.calls == ["<p>hi</p>"]


def test_primary_failure_falls_back_to_text_layout():
    document = DocumentGenerator([StubPrimaryRenderer(fail=True), TextPdfRenderer()]).render_document("<p>hi</p>")

    assert document.tier == RenderTier.STRUCTURED_FALLBACK
    assert document.degraded
    assert document.content.startswith(b"%PDF")
    assert any("browser unavailable" in w for w in document.warnings)


def test_all_renderers_failing_yields_minimal_document():
    generator = DocumentGenerator([StubPrimaryRenderer(fail=True), StubPrimaryRenderer(fail=True)])
    document = generator.render_document("<p>hi</p>")

    assert document.tier == RenderTier.MINIMAL_FALLBACK
    assert document.content == MINIMAL_PDF
    assert len(document.warnings) == 2


def test_empty_renderer_output_counts_as_failure():
    class EmptyRenderer(StubPrimaryRenderer):
        def render(self, html):
            return b""

    document = DocumentGenerator([EmptyRenderer()]).render_document("<p>hi</p>")
    assert document.tier == RenderTier.MINIMAL_FALLBACK


@pytest.mark.parametrize("html", AWKWARD_INPUTS)
def test_generator_never_raises(html):
    generator = DocumentGenerator([StubPrimaryRenderer(fail=True), TextPdfRenderer()])
    document = generator.render_document(html)
    assert document.content
    assert document.content.startswith(b"%PDF")


def test_from_settings_orders_chromium_first():
    generator = DocumentGenerator.from_settings(Settings(_env_file=None, PDF_PRIMARY_ENABLED=True))
    assert isinstance(generator.renderers[0], ChromiumPdfRenderer)
    assert isinstance(generator.renderers[1], TextPdfRenderer)


def test_from_settings_without_primary():
    generator = DocumentGenerator.from_settings(Settings(_env_file=None, PDF_PRIMARY_ENABLED=False))
    assert [type(r) for r in generator.renderers] == [TextPdfRenderer]
