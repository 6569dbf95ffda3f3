"""
Signature capture helpers: data-URL decoding, verification hash, browser
detection and the signature block embedded into the signed document.
"""
from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import html as html_lib
import logging
import re
from datetime import datetime, timezone
from typing import NamedTuple, Optional

from leasedesk.models.lease import DigitalSignature

logger = logging.getLogger(__name__)

HASH_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_DATA_URL = re.compile(
    r"^data:image/(?P<fmt>png|jpe?g|gif|webp);base64,(?P<data>[A-Za-z0-9+/=\s]+)$",
    re.IGNORECASE,
)

_EXTENSIONS = {"png": "png", "jpg": "jpg", "jpeg": "jpg", "gif": "gif", "webp": "webp"}
_MIME_TYPES = {"png": "image/png", "jpg": "image/jpeg", "gif": "image/gif", "webp": "image/webp"}


class SignaturePayloadError(ValueError):
    pass


class SignatureImage(NamedTuple):
    data: bytes
    extension: str

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES[self.extension]


def decode_signature_payload(data_url: Optional[str]) -> SignatureImage:
    """Decode a data:image/...;base64 URL; SignaturePayloadError otherwise."""
    if not data_url or not data_url.startswith("data:image/"):
        raise SignaturePayloadError("Invalid signature data")

    match = _DATA_URL.match(data_url.strip())
    if not match:
        raise SignaturePayloadError("Invalid signature data: unsupported image format")

    try:
        data = base64.b64decode("".join(match.group("data").split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise SignaturePayloadError(f"Invalid signature data: {exc}") from exc

    if not data:
        raise SignaturePayloadError("Invalid signature data: empty image")

    return SignatureImage(data=data, extension=_EXTENSIONS[match.group("fmt").lower()])


def mime_type_for_path(path: str) -> str:
    extension = path.rsplit(".", 1)[-1].lower() if "." in path else "png"
    return _MIME_TYPES.get(_EXTENSIONS.get(extension, "png"), "image/png")


def compute_signature_hash(
    lease_id: int,
    signer_ip_address: str,
    signed_at: datetime,
    image_bytes: bytes,
) -> str:
    """base64(SHA-256("lease|ip|timestamp|sha256(image)"))."""
    if signed_at.tzinfo is not None:
        signed_at = signed_at.astimezone(timezone.utc)
    image_digest = hashlib.sha256(image_bytes).hexdigest()
    payload = f"{lease_id}|{signer_ip_address}|{signed_at.strftime(HASH_TIMESTAMP_FORMAT)}|{image_digest}"
    return base64.b64encode(hashlib.sha256(payload.encode("utf-8")).digest()).decode("ascii")


def hashes_match(expected: str, actual: str) -> bool:
    return hmac.compare_digest(expected.encode("ascii"), actual.encode("ascii"))


# Most specific first: Edge and Opera agents both contain "Chrome".
_BROWSERS = (
    (("Edg/", "Edge"), "Microsoft Edge"),
    (("OPR/", "Opera"), "Opera"),
    (("Chrome",), "Google Chrome"),
    (("Firefox",), "Mozilla Firefox"),
    (("Safari",), "Safari"),
)


def browser_name(user_agent: Optional[str]) -> str:
    if not user_agent:
        return "Unknown"
    for markers, name in _BROWSERS:
        if any(marker in user_agent for marker in markers):
            return name
    return "Other Browser"


# ─────────────────────── Signed document ───────────────────────

_PLACEHOLDER_BLOCK = (
    "<div style='padding: 20px; background: #fff3cd; border: 2px dashed #f39c12; border-radius: 8px;'>"
    "<p style='color: #d68910; font-weight: bold; margin-bottom: 10px;'>Digital Signature Applied</p>"
    "<p style='color: #b7950b; font-size: 14px;'>Signature image could not be embedded in PDF.<br/>"
    "The lease was digitally signed and is legally binding.<br/>"
    "Original signature data is securely stored.</p>"
    "</div>"
)


def signature_block(
    signature: DigitalSignature,
    image_data_url: Optional[str],
    signer_name: str = "Tenant",
) -> str:
    signed = signature.signed_date
    if image_data_url:
        image_html = (
            f"<img src='{image_data_url}' alt='Digital Signature' "
            "style='max-width: 300px; max-height: 150px; border: 2px solid #2c3e50; "
            "border-radius: 5px; background: white; padding: 10px;' />"
        )
    else:
        image_html = _PLACEHOLDER_BLOCK

    notes_html = ""
    if signature.signing_notes:
        notes_html = (
            "<div style='margin-top: 15px; padding: 10px; background: #f8f9fa; border-radius: 5px;'>"
            f"<strong>Notes:</strong> {html_lib.escape(signature.signing_notes)}</div>"
        )

    return f"""
<div class='digital-signature'>
  <div class='signature-header'>Digital Signature Verification</div>
  <div class='signature-details'>
    <div>
      <p><strong>Signed by:</strong> {html_lib.escape(signer_name)}</p>
      <p><strong>Date:</strong> {signed:%d %B %Y}</p>
      <p><strong>Time:</strong> {signed:%H:%M:%S} UTC</p>
    </div>
    <div>
      <p><strong>IP Address:</strong> {html_lib.escape(signature.signer_ip_address or '')}</p>
      <p><strong>Browser:</strong> {browser_name(signature.signer_user_agent)}</p>
      <p><strong>Verified:</strong> <span style='color: #27ae60; font-weight: bold;'>Yes</span></p>
    </div>
  </div>
  <div class='signature-image'>
    {image_html}
    <p style='margin-top: 10px; font-size: 12px; color: #7f8c8d;'>Digitally signed on {signed:%d %B %Y} at {signed:%H:%M:%S}</p>
  </div>
  <div class='verification-section'>
    <p><strong>Verification Hash:</strong></p>
    <p style='font-family: monospace; font-size: 11px; word-break: break-all; color: #2c3e50;'>{signature.signature_hash}</p>
    <p style='margin-top: 10px; font-size: 12px; color: #27ae60;'><strong>This signature is cryptographically verified and legally binding.</strong></p>
  </div>
  {notes_html}
</div>"""


_BODY_CLOSE = re.compile(r"</body\s*>", re.IGNORECASE)


def embed_signature(html: str, block: str) -> str:
    """Insert *block* before the last </body>, or append when there is none."""
    matches = list(_BODY_CLOSE.finditer(html or ""))
    if not matches:
        return (html or "") + block
    last = matches[-1]
    return html[: last.start()] + block + html[last.start():]
