"""
HTTP Email Adapter.

Sends transactional emails through a Postmark-compatible REST API:
``POST {base_url}/email`` with a JSON body and a server token header.

Every request is bounded by the configured timeout; timeouts, transport
errors and non-2xx responses are all reported as a FAILED EmailResult.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from mailing_list.core.ports.email import EmailResult, EmailSendError

logger = logging.getLogger(__name__)

SERVER_TOKEN_HEADER = "X-Postmark-Server-Token"


class HttpEmailAdapter:
    """EmailPort implementation backed by httpx."""

    def __init__(
        self,
        base_url: str,
        sender: str,
        authorization_token: str,
        timeout_seconds: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.sender = sender
        self._authorization_token = authorization_token
        self._client = httpx.Client(timeout=timeout_seconds, transport=transport)

    def close(self) -> None:
        self._client.close()

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str,
    ) -> EmailResult:
        payload = {
            "From": self.sender,
            "To": recipient,
            "Subject": subject,
            "HtmlBody": body_html,
            "TextBody": body_text,
        }
        try:
            data = self._post(recipient, payload)
        except EmailSendError as e:
            logger.error("Email delivery to %s failed: %s", recipient, e.error)
            return EmailResult.failed(recipient, e.error)

        message_id = data.get("MessageID") if isinstance(data, dict) else None
        return EmailResult.queued(recipient, message_id=message_id)

    def _post(self, recipient: str, payload: dict[str, Any]) -> Any:
        try:
            resp = self._client.post(
                f"{self.base_url}/email",
                json=payload,
                headers={SERVER_TOKEN_HEADER: self._authorization_token},
            )
        except httpx.TimeoutException as e:
            raise EmailSendError(recipient, f"timeout: {e}") from e
        except httpx.HTTPError as e:
            raise EmailSendError(recipient, f"transport error: {e}") from e

        if resp.status_code >= 400:
            raise EmailSendError(recipient, f"provider returned HTTP {resp.status_code}")

        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError:
            return {}
