"""
Transports from the order form to the relay.

The order form hands a finished RelayRequest to a transport and gets back
either a successful RelayResponse or a SubmissionError:

    HttpRelayClient   - POSTs multipart to a relay URL (another host or this app)
    LocalRelayClient  - calls a RelayService in-process (no RELAY_URL configured)

Both apply the same interpretation of the relay's answer:
    - no response at all          -> TransportError
    - status outside 200-299      -> UpstreamError(body.error or "Request failed (<status>)")
    - body.success is not true    -> UpstreamError(body.error or "Submission failed")

Usage:
    client = HttpRelayClient("https://forms.example.com/api/orders")
    try:
        client.send(relay_request)
    except SubmissionError as e:
        show_error(e.message)
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from models.relay import RelayRequest, RelayResponse
from .exceptions import TransportError, UpstreamError


def check_relay_response(response: RelayResponse) -> RelayResponse:
    """
    Raise UpstreamError unless the relay reported success.

    Returns:
        The response, unchanged, when it is a success
    """
    if not response.ok:
        message = response.error or f"Request failed ({response.status_code})"
        raise UpstreamError(message, response.status_code, response.body)

    if not response.success:
        message = response.error or "Submission failed"
        raise UpstreamError(message, response.status_code, response.body)

    return response


class HttpRelayClient:
    """
    Sends submissions to the relay endpoint over HTTP.

    One POST per send(); failures are raised, never retried.
    """

    def __init__(
        self,
        relay_url: str,
        timeout_seconds: float = 60.0,
        http_client: Optional[httpx.Client] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize relay client.

        Args:
            relay_url: Full URL of the relay endpoint (e.g. .../api/orders)
            timeout_seconds: Timeout for the whole request
            http_client: Optional client to send through (tests inject one)
            logger: Logger instance (creates default if not provided)

        Raises:
            ValueError: If relay_url is empty
        """
        if not relay_url:
            raise ValueError("relay_url is required")

        self._relay_url = relay_url
        self._timeout = timeout_seconds
        self._http_client = http_client
        self._logger = logger or logging.getLogger("order_intake.core.relay_client")

    @property
    def relay_url(self) -> str:
        return self._relay_url

    def send(self, request: RelayRequest) -> RelayResponse:
        """
        POST the submission as multipart form data.

        Raises:
            TransportError: If no response was received
            UpstreamError: If the relay answered with a failure
        """
        self._logger.debug(f"Posting submission to relay {self._relay_url}")

        try:
            http_response = self._post(request)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            message = str(e) or "Network error"
            self._logger.error(f"Relay request failed: {message}")
            raise TransportError(message, {"relay_url": self._relay_url}) from e

        try:
            body = http_response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        response = RelayResponse(http_response.status_code, body)
        self._logger.info(f"Relay answered HTTP {response.status_code}")
        return check_relay_response(response)

    def _post(self, request: RelayRequest) -> httpx.Response:
        data = request.multipart_fields()
        files = request.multipart_files()
        if self._http_client is not None:
            return self._http_client.post(self._relay_url, data=data, files=files, timeout=self._timeout)

        with httpx.Client(timeout=self._timeout) as client:
            return client.post(self._relay_url, data=data, files=files)


class LocalRelayClient:
    """Hands submissions straight to an in-process RelayService."""

    def __init__(self, relay_service, logger: Optional[logging.Logger] = None):
        self._relay_service = relay_service
        self._logger = logger or logging.getLogger("order_intake.core.relay_client")

    def send(self, request: RelayRequest) -> RelayResponse:
        """
        Relay in-process.

        Raises:
            UpstreamError: If the relay answered with a failure
        """
        response = self._relay_service.relay(request)
        self._logger.info(f"In-process relay answered HTTP {response.status_code}")
        return check_relay_response(response)
