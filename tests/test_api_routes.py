"""
Integration tests for the JSON endpoints.
"""

import base64
import io
from unittest.mock import MagicMock

from services.relay_service import GENERIC_CONFIG_ERROR


def _relay_form(image_bytes):
    return {
        "orderNumber": "1005",
        "creatorName": "Jane Doe",
        "quantityOrdered": "1",
        "submittedUrl": "https://shop.example.com/p/1",
        "orderConfirmationLink": "https://shop.example.com/o/1",
        "message": "hi",
        "submittedQr": "https://qr.example.com/?data=p",
        "confirmationQr": "https://qr.example.com/?data=o",
        "image1": (io.BytesIO(image_bytes()), "ORDER1005_Image1.png", "image/png"),
    }


class TestRelayEndpoint:

    def test_preflight(self, client):
        response = client.options("/api/orders")

        assert response.status_code == 204

    def test_method_not_allowed(self, client):
        response = client.get("/api/orders")

        assert response.status_code == 405
        assert response.get_json() == {"error": "Method not allowed"}

    def test_relays_to_webhook(self, client, webhook, image_bytes):
        response = client.post("/api/orders", data=_relay_form(image_bytes), content_type="multipart/form-data")

        assert response.status_code == 200
        assert response.get_json() == {"success": True}

        payload = webhook.payloads[0]
        assert payload["message"] == "hi"
        assert payload["submittedQrUrl"] == "https://qr.example.com/?data=p"
        assert payload["image1Name"] == "ORDER1005_Image1.png"
        assert base64.b64decode(payload["image1Base64"]) == image_bytes()

    def test_upstream_status_mirrored(self, client, webhook, image_bytes):
        webhook.status_code = 400
        webhook.body = {"success": False, "error": "Missing field"}

        response = client.post("/api/orders", data=_relay_form(image_bytes), content_type="multipart/form-data")

        assert response.status_code == 400
        assert response.get_json() == {"success": False, "error": "Missing field"}

    def test_unconfigured(self, app_factory, webhook, image_bytes):
        client = app_factory(WEBHOOK_URL="").test_client()

        response = client.post("/api/orders", data=_relay_form(image_bytes), content_type="multipart/form-data")

        assert response.status_code == 500
        assert response.get_json() == {"error": GENERIC_CONFIG_ERROR}
        assert webhook.calls == []

    def test_unexpected_failure(self, app, image_bytes):
        broken = MagicMock()
        broken.relay.side_effect = RuntimeError("boom")
        app.config["RELAY_SERVICE"] = broken

        response = app.test_client().post(
            "/api/orders", data=_relay_form(image_bytes), content_type="multipart/form-data"
        )

        assert response.status_code == 500
        assert response.get_json() == {"error": "Internal server error"}


class TestValidateImageEndpoint:

    def test_valid(self, client, image_bytes, upload_dir):
        response = client.post(
            "/api/images/validate",
            data={"image": (io.BytesIO(image_bytes(1000, 1200)), "card.png", "image/png")},
            content_type="multipart/form-data",
        )

        assert response.get_json() == {"valid": True, "width": 1000, "height": 1200}
        assert list(upload_dir.iterdir()) == []

    def test_too_small(self, client, image_bytes):
        response = client.post(
            "/api/images/validate",
            data={"image": (io.BytesIO(image_bytes(600, 800)), "card.png", "image/png")},
            content_type="multipart/form-data",
        )

        body = response.get_json()
        assert body["valid"] is False
        assert body["reason"] == "below_min_resolution"

    def test_missing_file(self, client):
        response = client.post("/api/images/validate")

        assert response.status_code == 400


class TestHealth:

    def test_health(self, client):
        body = client.get("/health").get_json()

        assert body["status"] == "healthy"
        assert body["webhook_configured"] is True

    def test_health_unconfigured(self, app_factory):
        body = app_factory(WEBHOOK_URL="").test_client().get("/health").get_json()

        assert body["webhook_configured"] is False

    def test_unknown_api_path_is_json(self, client):
        response = client.get("/api/nothing")

        assert response.status_code == 404
        assert response.get_json() == {"error": "Not found"}
