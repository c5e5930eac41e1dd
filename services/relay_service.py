"""
Webhook relay service.

Turns a multipart order submission into the JSON object the destination
webhook expects, forwards it once, and maps the webhook's answer to a
status + JSON body for the caller.

Response mapping:
    no webhook URL configured      -> 500 {"error": <generic message>}, no outbound call
    malformed webhook URL          -> 500 {"error": <generic message>}
    transport failure / timeout    -> 502 {"error": <transport error text>}
    body is not a JSON object      -> body becomes {"error": <raw text>}
    status outside 200-299         -> same status, same body
    success flag not exactly true  -> 502, same body
    otherwise                      -> 200 {"success": true}

There is NO retry logic: exactly one upstream attempt per request.

Usage:
    relay_service = RelayService(RelayConfig.from_mapping(app.config))
    response = relay_service.relay(RelayRequest.from_form(request.form, request.files))
    return jsonify(response.body), response.status_code
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from config import RelayConfig
from core.exceptions import ConfigurationError
from models.relay import RelayRequest, RelayResponse
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

GENERIC_CONFIG_ERROR = "Server Error Please Contact Support"
UPSTREAM_FAILED = "Upstream request failed"
UPSTREAM_NON_JSON = "Upstream returned non-JSON"
GATEWAY_ERROR_STATUS = 502


class RelayService:
    """
    Stateless forwarder from order submissions to the destination webhook.

    Each call to relay() is self-contained: one outbound POST with a fixed
    timeout, no shared state between requests.
    """

    def __init__(self, config: RelayConfig, http_client: Optional[httpx.Client] = None):
        """
        Initialize relay service.

        Args:
            config: Webhook URL, optional secret, timeout
            http_client: Optional client to send through (tests inject one
                         with a mock transport). When omitted a short-lived
                         client is created per call.
        """
        self._config = config
        self._http_client = http_client

        if config.webhook_url:
            logger.info(f"Relay configured (timeout={config.timeout_seconds:.0f}s, secret={'yes' if config.secret else 'no'})")
        else:
            logger.warning("Relay has no webhook URL configured - submissions will be rejected")

    @property
    def config(self) -> RelayConfig:
        return self._config

    def _require_webhook_url(self) -> str:
        if not self._config.webhook_url:
            raise ConfigurationError("APPSCRIPT_WEBAPP_URL")
        return self._config.webhook_url

    def relay(self, request: RelayRequest) -> RelayResponse:
        """
        Forward one submission to the webhook.

        Never raises for upstream or configuration problems; every outcome
        is a RelayResponse.

        Args:
            request: Parsed submission

        Returns:
            RelayResponse to send back to the caller
        """
        try:
            webhook_url = self._require_webhook_url()
        except ConfigurationError as e:
            logger.error(f"Relay rejected submission: {e}")
            return RelayResponse.failed(500, GENERIC_CONFIG_ERROR)

        payload = request.to_webhook_payload(self._config.secret)
        order_number = request.fields.get("orderNumber", "")
        logger.info(
            f"Relaying order {order_number!r} with {len(request.attachments)} image(s)"
        )

        try:
            upstream = self._post(webhook_url, payload)
        except httpx.InvalidURL as e:
            logger.error(f"Relay rejected submission: webhook URL is invalid ({e})")
            return RelayResponse.failed(500, GENERIC_CONFIG_ERROR)
        except httpx.HTTPError as e:
            message = str(e) or UPSTREAM_FAILED
            logger.error(f"Webhook request failed for order {order_number!r}: {message}")
            return RelayResponse.failed(GATEWAY_ERROR_STATUS, message)

        body = self._decode_body(upstream)

        if not 200 <= upstream.status_code < 300:
            logger.warning(f"Webhook returned HTTP {upstream.status_code} for order {order_number!r}")
            return RelayResponse(upstream.status_code, body)

        if body.get("success") is not True:
            logger.warning(
                f"Webhook reported failure for order {order_number!r}: {body.get('error', 'no error given')}"
            )
            return RelayResponse(GATEWAY_ERROR_STATUS, body)

        logger.info(f"Order {order_number!r} accepted by webhook")
        return RelayResponse.succeeded()

    def _post(self, url: str, payload: Dict[str, Any]) -> httpx.Response:
        timeout = self._config.timeout_seconds
        if self._http_client is not None:
            return self._http_client.post(url, json=payload, timeout=timeout)

        # Apps Script web apps answer with a redirect to the result
        with httpx.Client(timeout=timeout, follow_redirects=True) as client:
            return client.post(url, json=payload)

    @staticmethod
    def _decode_body(response: httpx.Response) -> Dict[str, Any]:
        """Parse the webhook body, wrapping anything that is not a JSON object."""
        text = response.text
        try:
            decoded = response.json()
        except ValueError:
            decoded = None

        if not isinstance(decoded, dict):
            return {"error": text if text else UPSTREAM_NON_JSON}
        return decoded
