"""Transactional email delivery through Brevo."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

import httpx
from loguru import logger
from tenacity import before_sleep_log, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from vocab_trainer.config import settings
from vocab_trainer.utils.exceptions import NotConfigured, UpstreamUnavailable


@dataclass
class BrevoMailer:
    """Send HTML emails with the Brevo SMTP API."""

    api_key: str
    sender_email: str
    sender_name: str = "Vocab Trainer"
    base_url: str = "https://api.brevo.com/v3"
    request_timeout: float = 15.0

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        before_sleep=before_sleep_log(logger, "WARNING"),
        reraise=True,
    )
    def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        headers = {
            "accept": "application/json",
            "api-key": self.api_key,
            "content-type": "application/json",
        }
        with httpx.Client(base_url=self.base_url, timeout=self.request_timeout) as client:
            return client.post("/smtp/email", json=payload, headers=headers)

    def send(self, *, recipient: str, subject: str, html: str) -> Dict[str, Any]:
        payload = {
            "sender": {"email": self.sender_email, "name": self.sender_name},
            "to": [{"email": recipient}],
            "subject": subject,
            "htmlContent": html,
        }
        try:
            response = self._post(payload)
        except httpx.TransportError as exc:
            raise UpstreamUnavailable("Email provider unreachable") from exc

        if response.status_code >= 400:
            logger.error("Brevo returned error", status=response.status_code, body=response.text)
            raise UpstreamUnavailable("Email provider rejected the message", {"status": response.status_code})

        logger.info("Reminder email sent", recipient=recipient)
        return response.json() if response.content else {}


def build_mailer() -> BrevoMailer:
    """Create the mailer from settings, raising :class:`NotConfigured` when incomplete."""

    if not settings.BREVO_API_KEY:
        raise NotConfigured("BREVO_API_KEY is not configured")
    if not settings.SENDER_EMAIL or not settings.RECIPIENT_EMAIL:
        raise NotConfigured("SENDER_EMAIL and RECIPIENT_EMAIL must be configured")
    return BrevoMailer(api_key=settings.BREVO_API_KEY, sender_email=settings.SENDER_EMAIL)
