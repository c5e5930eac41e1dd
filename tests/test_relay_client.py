"""
Unit tests for the order form's relay transports.
"""

from unittest.mock import MagicMock

import httpx
import pytest

from core.exceptions import SubmissionError, TransportError, UpstreamError
from core.relay_client import HttpRelayClient, LocalRelayClient, check_relay_response
from models.relay import RelayAttachment, RelayRequest, RelayResponse
from services.relay_service import GENERIC_CONFIG_ERROR


RELAY_URL = "https://forms.example.com/api/orders"


# Fixtures

@pytest.fixture
def relay_request():
    return RelayRequest(
        fields={"orderNumber": "1005", "creatorName": "Jane Doe"},
        attachments={1: RelayAttachment("ORDER1005_Image1.png", "image/png", b"png-bytes")},
    )


@pytest.fixture
def relay(webhook):
    """The stub plays the relay endpoint here."""
    return webhook


@pytest.fixture
def client(http_client):
    return HttpRelayClient(RELAY_URL, timeout_seconds=5, http_client=http_client)


# Tests for check_relay_response

class TestCheckRelayResponse:

    def test_success_returned(self):
        response = RelayResponse.succeeded()

        assert check_relay_response(response) is response

    def test_error_status_uses_body_error(self):
        with pytest.raises(UpstreamError) as exc_info:
            check_relay_response(RelayResponse(400, {"error": "Missing orderNumber"}))

        assert exc_info.value.message == "Missing orderNumber"
        assert exc_info.value.status_code == 400

    def test_error_status_without_message(self):
        with pytest.raises(UpstreamError) as exc_info:
            check_relay_response(RelayResponse(503, {}))

        assert exc_info.value.message == "Request failed (503)"

    def test_success_flag_missing(self):
        with pytest.raises(UpstreamError) as exc_info:
            check_relay_response(RelayResponse(200, {}))

        assert exc_info.value.message == "Submission failed"


# Tests for HttpRelayClient

class TestHttpRelayClient:

    def test_requires_url(self):
        with pytest.raises(ValueError):
            HttpRelayClient("")

    def test_posts_multipart(self, client, relay, relay_request):
        client.send(relay_request)

        assert len(relay.calls) == 1
        sent = relay.calls[0]
        assert str(sent.url) == RELAY_URL
        assert sent.headers["content-type"].startswith("multipart/form-data")
        assert b'name="orderNumber"' in sent.content
        assert b'filename="ORDER1005_Image1.png"' in sent.content
        assert b"png-bytes" in sent.content

    def test_success(self, client, relay_request):
        assert client.send(relay_request).success

    def test_upstream_failure(self, client, relay, relay_request):
        relay.status_code = 502
        relay.body = {"success": False, "error": "Sheet is locked"}

        with pytest.raises(UpstreamError) as exc_info:
            client.send(relay_request)

        assert exc_info.value.message == "Sheet is locked"

    def test_non_json_answer(self, client, relay, relay_request):
        relay.text = "<html>gateway</html>"

        with pytest.raises(UpstreamError) as exc_info:
            client.send(relay_request)

        assert exc_info.value.message == "Submission failed"

    def test_network_failure(self, client, relay, relay_request):
        relay.error = httpx.ConnectError("Connection refused")

        with pytest.raises(TransportError) as exc_info:
            client.send(relay_request)

        assert exc_info.value.message == "Connection refused"
        assert isinstance(exc_info.value, SubmissionError)
        assert len(relay.calls) == 1

    def test_malformed_relay_url(self, http_client, relay, relay_request):
        client = HttpRelayClient("http://[::1", timeout_seconds=5, http_client=http_client)

        with pytest.raises(TransportError):
            client.send(relay_request)

        assert relay.calls == []


# Tests for LocalRelayClient

class TestLocalRelayClient:

    def test_delegates_to_service(self, relay_request):
        service = MagicMock()
        service.relay.return_value = RelayResponse.succeeded()

        LocalRelayClient(service).send(relay_request)

        service.relay.assert_called_once_with(relay_request)

    def test_failure_raises(self, relay_request):
        service = MagicMock()
        service.relay.return_value = RelayResponse.failed(500, GENERIC_CONFIG_ERROR)

        with pytest.raises(UpstreamError) as exc_info:
            LocalRelayClient(service).send(relay_request)

        assert exc_info.value.message == GENERIC_CONFIG_ERROR
        assert exc_info.value.status_code == 500
