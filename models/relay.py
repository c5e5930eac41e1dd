"""
Relay data models.

RelayRequest is what the order form sends to the relay endpoint and what
the relay turns into the webhook JSON. RelayResponse is what the relay
answers with. Neither outlives a single HTTP round trip.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Dict, Any, Mapping, Optional, Tuple


# Inbound multipart field name -> outbound webhook JSON key
FORM_TO_WEBHOOK_FIELDS = (
    ("orderNumber", "orderNumber"),
    ("creatorName", "creatorName"),
    ("quantityOrdered", "quantityOrdered"),
    ("submittedUrl", "submittedUrl"),
    ("orderConfirmationLink", "orderConfirmationLink"),
    ("message", "message"),
    ("submittedQr", "submittedQrUrl"),
    ("confirmationQr", "confirmationQrUrl"),
)

MAX_ATTACHMENTS = 5


@dataclass(frozen=True)
class RelayAttachment:
    """One image part of a relay request."""

    filename: str
    content_type: str
    content: bytes = field(repr=False)

    def to_base64(self) -> str:
        return base64.b64encode(self.content).decode("ascii")


@dataclass(frozen=True)
class RelayRequest:
    """
    A submission on its way through the relay.

    ``fields`` uses the inbound multipart names (orderNumber, submittedQr, ...).
    ``attachments`` is keyed by image slot, 1..5; missing slots are absent.
    """

    fields: Dict[str, str] = field(default_factory=dict)
    attachments: Dict[int, RelayAttachment] = field(default_factory=dict)

    def __post_init__(self):
        for slot in self.attachments:
            if not 1 <= slot <= MAX_ATTACHMENTS:
                raise ValueError(f"Attachment slot out of range: {slot}")

    @classmethod
    def from_form(cls, form: Mapping[str, str], files: Mapping[str, Any]) -> "RelayRequest":
        """
        Build from a parsed multipart body.

        Args:
            form: Text fields (werkzeug MultiDict or plain dict)
            files: File parts keyed image1..image5 (werkzeug FileStorage-like:
                   .filename, .mimetype, .read())

        Returns:
            RelayRequest; missing text fields become empty strings,
            missing or empty file parts are skipped
        """
        text = {name: str(form.get(name, "") or "") for name, _ in FORM_TO_WEBHOOK_FIELDS}

        attachments: Dict[int, RelayAttachment] = {}
        for slot in range(1, MAX_ATTACHMENTS + 1):
            upload = files.get(f"image{slot}")
            if upload is None or not upload.filename:
                continue
            content = upload.read()
            attachments[slot] = RelayAttachment(
                filename=upload.filename,
                content_type=upload.mimetype or "",
                content=content,
            )

        return cls(fields=text, attachments=attachments)

    def multipart_fields(self) -> Dict[str, str]:
        """Text parts for re-posting as multipart."""
        return {name: self.fields.get(name, "") for name, _ in FORM_TO_WEBHOOK_FIELDS}

    def multipart_files(self) -> Dict[str, Tuple[str, bytes, str]]:
        """File parts for re-posting as multipart (httpx files= format)."""
        return {
            f"image{slot}": (a.filename, a.content, a.content_type or "application/octet-stream")
            for slot, a in sorted(self.attachments.items())
        }

    def to_webhook_payload(self, secret: Optional[str] = None) -> Dict[str, Any]:
        """
        Build the JSON object the destination webhook expects.

        Text fields are copied verbatim; each present image adds
        image{n}Base64 and image{n}Name.
        """
        payload: Dict[str, Any] = {
            webhook_key: self.fields.get(form_key, "")
            for form_key, webhook_key in FORM_TO_WEBHOOK_FIELDS
        }

        if secret:
            payload["secret"] = secret

        for slot, attachment in sorted(self.attachments.items()):
            payload[f"image{slot}Base64"] = attachment.to_base64()
            payload[f"image{slot}Name"] = attachment.filename

        return payload


@dataclass(frozen=True)
class RelayResponse:
    """HTTP status plus JSON body returned by the relay."""

    status_code: int
    body: Dict[str, Any]

    @property
    def ok(self) -> bool:
        """Status in 200-299."""
        return 200 <= self.status_code < 300

    @property
    def success(self) -> bool:
        """2xx and the body says success: true (exactly)."""
        return self.ok and self.body.get("success") is True

    @property
    def error(self) -> Optional[str]:
        value = self.body.get("error")
        return str(value) if value is not None else None

    @classmethod
    def succeeded(cls) -> "RelayResponse":
        return cls(200, {"success": True})

    @classmethod
    def failed(cls, status_code: int, message: str) -> "RelayResponse":
        return cls(status_code, {"error": message})
