"""Email delivery for contact submissions via the Resend HTTP API."""

import os
import logging
from dataclasses import dataclass
from typing import Optional

import requests

from src.shared.contact.schemas import ContactSubmission, OutboundEmail


DEFAULT_RESEND_API_URL = "https://api.resend.com/emails"
DEFAULT_FROM_EMAIL = "Portfolio Contact <onboarding@resend.dev>"
DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass
class EmailConfig:
    api_key: Optional[str]
    to_email: Optional[str]
    from_email: str
    api_url: str
    timeout: float

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) and bool(self.to_email)


@dataclass
class DeliveryResult:
    status_code: int
    success: bool
    message: Optional[str] = None
    id: Optional[str] = None


def get_email_config() -> EmailConfig:
    """Read email provider settings from the environment."""
    try:
        timeout = float(os.environ.get("CONTACT_EMAIL_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS))
    except ValueError:
        logging.warning("Invalid CONTACT_EMAIL_TIMEOUT_SECONDS, using default")
        timeout = DEFAULT_TIMEOUT_SECONDS

    return EmailConfig(
        api_key=os.environ.get("RESEND_API_KEY"),
        to_email=os.environ.get("CONTACT_TO_EMAIL"),
        from_email=os.environ.get("CONTACT_FROM_EMAIL") or DEFAULT_FROM_EMAIL,
        api_url=os.environ.get("RESEND_API_URL") or DEFAULT_RESEND_API_URL,
        timeout=timeout,
    )


def build_contact_email(submission: ContactSubmission, config: EmailConfig) -> OutboundEmail:
    """Compose the message relayed to the site owner. Reply-To is the submitter."""
    body = (
        f"Name: {submission.name}\n"
        f"Email: {submission.email}\n"
        f"\n"
        f"Message:\n"
        f"{submission.message}"
    )
    return OutboundEmail(
        from_=config.from_email,
        to=[config.to_email],
        reply_to=submission.email,
        subject=f"Portfolio Contact: {submission.name}",
        text=body,
    )


def send_contact_email(submission: ContactSubmission, config: EmailConfig) -> DeliveryResult:
    """
    Send one contact email through the provider. No retries.

    Args:
        submission: Validated submission
        config: Provider configuration; must be fully configured

    Returns:
        DeliveryResult with the HTTP status the gate should answer with
    """
    payload = build_contact_email(submission, config).model_dump(by_alias=True)

    try:
        response = requests.post(
            config.api_url,
            json=payload,
            headers={
                "Authorization": f"Bearer {config.api_key}",
                "Content-Type": "application/json",
            },
            timeout=config.timeout,
        )
        body = response.json()
    except requests.Timeout:
        logging.error(f"Contact email delivery timed out after {config.timeout}s")
        return DeliveryResult(500, False, "Unable to process contact request.")
    except (requests.RequestException, ValueError) as e:
        logging.error(f"Failed to send contact form email: {str(e)}", exc_info=True)
        return DeliveryResult(500, False, "Unable to process contact request.")

    if not isinstance(body, dict):
        body = {}

    if not response.ok:
        logging.warning(f"Email provider rejected contact email with status {response.status_code}")
        return DeliveryResult(502, False, body.get("message") or "Failed to deliver email.")

    email_id = body.get("id")
    email_id = str(email_id) if email_id else None
    logging.info(f"Contact form email sent successfully (id={email_id})")
    return DeliveryResult(200, True, id=email_id)
