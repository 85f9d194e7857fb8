"""
Anti-spam and input validation stages for contact submissions.

Each stage is a pure predicate over a ContactSubmission returning a
StageResult. VALIDATION_STAGES is the ordered list the gate runs; the first
failing stage wins.

The timing window relies on a timestamp supplied by the browser, so it only
deters naive bots. A client can fabricate formStartedAt.
"""

import math
import re
import time
from typing import Callable, List, NamedTuple, Optional, Tuple

from src.shared.contact.schemas import ContactSubmission


HUMAN_CHALLENGE_ANSWER = "7"
MIN_FORM_FILL_MS = 4000
MAX_FORM_AGE_MS = 2 * 60 * 60 * 1000
MIN_MESSAGE_LENGTH = 10

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


class StageResult(NamedTuple):
    ok: bool
    stage: str
    message: Optional[str] = None


def _passed(stage: str) -> StageResult:
    return StageResult(True, stage)


def _failed(stage: str, message: str) -> StageResult:
    return StageResult(False, stage, message)


def now_ms() -> float:
    return time.time() * 1000


def is_email(value: str) -> bool:
    """Permissive syntax check: local part, '@', and a dotted domain."""
    return bool(EMAIL_PATTERN.match(value))


def check_required_fields(submission: ContactSubmission, now: float) -> StageResult:
    if not submission.name or not submission.email or not submission.message:
        return _failed("required_fields", "Missing required fields.")
    return _passed("required_fields")


def check_honeypot(submission: ContactSubmission, now: float) -> StageResult:
    if submission.website:
        return _failed("honeypot", "Spam check failed.")
    return _passed("honeypot")


def check_human_challenge(submission: ContactSubmission, now: float) -> StageResult:
    if submission.human_check != HUMAN_CHALLENGE_ANSWER:
        return _failed("human_challenge", "Human challenge failed.")
    return _passed("human_challenge")


def check_timing_window(submission: ContactSubmission, now: float) -> StageResult:
    """
    Rejects forms submitted faster than a human could fill them, or with a
    start time older than MAX_FORM_AGE_MS. Both bounds are inclusive.

    Args:
        submission: Parsed submission
        now: Current time in epoch milliseconds
    """
    started_at = submission.form_started_at
    if not math.isfinite(started_at):
        return _failed("timing_window", "Form validation failed. Please try again.")

    elapsed = now - started_at
    if elapsed < MIN_FORM_FILL_MS or elapsed > MAX_FORM_AGE_MS:
        return _failed("timing_window", "Form validation failed. Please try again.")
    return _passed("timing_window")


def check_email_syntax(submission: ContactSubmission, now: float) -> StageResult:
    if not is_email(submission.email):
        return _failed("email_syntax", "Invalid email address.")
    return _passed("email_syntax")


def check_message_length(submission: ContactSubmission, now: float) -> StageResult:
    if len(submission.message) < MIN_MESSAGE_LENGTH:
        return _failed(
            "message_length",
            f"Message must be at least {MIN_MESSAGE_LENGTH} characters."
        )
    return _passed("message_length")


Stage = Callable[[ContactSubmission, float], StageResult]

# Run in this order; the first failure is reported.
VALIDATION_STAGES: Tuple[Stage, ...] = (
    check_required_fields,
    check_honeypot,
    check_human_challenge,
    check_timing_window,
    check_email_syntax,
    check_message_length,
)


def validate_submission(
    submission: ContactSubmission,
    now: Optional[float] = None,
    stages: Optional[List[Stage]] = None
) -> StageResult:
    """
    Run the validation stages in order and stop at the first failure.

    Args:
        submission: Parsed submission
        now: Current time in epoch milliseconds (defaults to the wall clock)
        stages: Override for the stage list

    Returns:
        The first failing StageResult, or a passing result named "all"
    """
    if now is None:
        now = now_ms()
    for stage in stages or VALIDATION_STAGES:
        result = stage(submission, now)
        if not result.ok:
            return result
    return _passed("all")
