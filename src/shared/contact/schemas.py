"""Pydantic schemas for contact API."""

import math
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional


class ContactSubmission(BaseModel):
    """Schema for a contact form submission.

    Fields are coerced leniently so that every body reaches the validation
    pipeline: non-string text becomes "" and a non-numeric timestamp becomes NaN.
    """
    name: str = ""
    email: str = ""
    message: str = ""
    website: str = ""  # honeypot, hidden from humans
    human_check: str = Field("", alias="humanCheck")
    form_started_at: float = Field(math.nan, alias="formStartedAt")

    @field_validator('name', 'email', 'message', 'website', 'human_check', mode='before')
    @classmethod
    def trim_text(cls, v):
        """Trim surrounding whitespace; anything that is not a string is treated as empty."""
        if isinstance(v, str):
            return v.strip()
        return ""

    @field_validator('form_started_at', mode='before')
    @classmethod
    def coerce_timestamp(cls, v):
        if isinstance(v, bool) or v is None:
            return math.nan
        if isinstance(v, (int, float)):
            try:
                return float(v)
            except OverflowError:
                return math.nan
        if isinstance(v, str):
            try:
                return float(v.strip()) if v.strip() else math.nan
            except ValueError:
                return math.nan
        return math.nan

    @classmethod
    def from_body(cls, body) -> "ContactSubmission":
        """Build a submission from a decoded JSON body; non-objects count as empty."""
        if not isinstance(body, dict):
            body = {}
        return cls.model_validate(body)


class ContactResponse(BaseModel):
    """Schema for contact form response."""
    success: bool
    message: Optional[str] = None
    id: Optional[str] = None


class OutboundEmail(BaseModel):
    """Payload sent to the email provider."""
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(..., alias="from")
    to: List[str]
    reply_to: str
    subject: str
    text: str
