"""Contact routes for relaying portfolio contact form messages."""

import logging
from typing import Dict, Optional
from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool

from src.shared.contact.schemas import ContactSubmission, ContactResponse
from src.shared.contact.rate_limit import ContactRateLimiter, get_client_ip, get_rate_limiter
from src.shared.contact.validation import validate_submission
from src.shared.contact.email_utils import get_email_config, send_contact_email

router = APIRouter(prefix="/api/contact", tags=["contact"])

# Registered so that wrong methods reach the gate and get the JSON envelope.
ROUTE_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


class ContactError(Exception):
    """A terminal gate failure, rendered as {success: false, message}."""

    def __init__(self, status_code: int, message: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.headers = headers or {}


async def _read_submission(request: Request) -> ContactSubmission:
    try:
        body = await request.json()
    except ValueError:
        body = None
    return ContactSubmission.from_body(body)


@router.api_route("", methods=ROUTE_METHODS, response_model=ContactResponse,
                  response_model_exclude_unset=True)
async def submit_contact_form(
    request: Request,
    limiter: ContactRateLimiter = Depends(get_rate_limiter)
):
    """
    Relay a contact form submission to the site owner's inbox.

    Checks run in a fixed order and the first failure is returned:
    method, rate limit (5 per 10 minutes per client), required fields,
    honeypot, human challenge, timing window, email syntax, message length,
    server configuration. Only then is a single delivery attempted.
    """
    if request.method != "POST":
        raise ContactError(
            status.HTTP_405_METHOD_NOT_ALLOWED,
            "Method not allowed.",
            headers={"Allow": "POST"}
        )

    # Counted before the body is parsed, so malformed requests use up the quota too.
    client_ip = get_client_ip(request)
    decision = limiter.hit(client_ip)
    if decision.blocked:
        logging.warning(f"Contact rate limit exceeded for {client_ip}")
        raise ContactError(
            status.HTTP_429_TOO_MANY_REQUESTS,
            "Too many requests. Please wait before trying again.",
            headers={"Retry-After": str(decision.retry_after_seconds)}
        )

    submission = await _read_submission(request)
    result = validate_submission(submission)
    if not result.ok:
        logging.info(f"Contact submission rejected at {result.stage} from {client_ip}")
        raise ContactError(status.HTTP_400_BAD_REQUEST, result.message)

    config = get_email_config()
    if not config.is_configured:
        logging.error("Contact email environment not configured (RESEND_API_KEY / CONTACT_TO_EMAIL)")
        raise ContactError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Server email environment is not configured."
        )

    delivery = await run_in_threadpool(send_contact_email, submission, config)
    if not delivery.success:
        raise ContactError(delivery.status_code, delivery.message)

    return ContactResponse(success=True, id=delivery.id)
