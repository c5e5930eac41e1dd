"""QR code image links for the two order URLs."""

from __future__ import annotations

from urllib.parse import urlencode


QR_API_BASE = "https://api.qrserver.com/v1/create-qr-code/"
QR_DEFAULT_SIZE = "200x200"


class QRCodeLinkBuilder:
    """Builds deterministic QR image URLs for a link."""

    def __init__(self, api_base: str = QR_API_BASE, size: str = QR_DEFAULT_SIZE):
        self.api_base = api_base
        self.size = size

    def image_url(self, link: str) -> str:
        """
        Return the QR image URL for ``link``.

        Same link and size always give the same URL.
        """
        query = urlencode({"size": self.size, "data": link})
        return f"{self.api_base}?{query}"

    @classmethod
    def from_config(cls, config) -> "QRCodeLinkBuilder":
        return cls(
            api_base=config.get("QR_API_BASE") or QR_API_BASE,
            size=config.get("QR_SIZE") or QR_DEFAULT_SIZE,
        )
