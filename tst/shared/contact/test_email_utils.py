"""Tests for composing and delivering contact emails."""

import requests

from src.shared.contact.email_utils import (
    DEFAULT_FROM_EMAIL,
    DEFAULT_RESEND_API_URL,
    build_contact_email,
    get_email_config,
    send_contact_email,
)
from src.shared.contact.schemas import ContactSubmission


def make_submission():
    return ContactSubmission.from_body({
        "name": "  Ada Lovelace ",
        "email": " ada@example.com ",
        "message": " Let's build an analytical engine. ",
        "humanCheck": "7",
        "formStartedAt": 0,
    })


def test_config_defaults(email_env):
    config = get_email_config()
    assert config.is_configured
    assert config.from_email == DEFAULT_FROM_EMAIL
    assert config.api_url == DEFAULT_RESEND_API_URL
    assert config.timeout == 10.0


def test_config_missing_values(monkeypatch):
    monkeypatch.delenv("RESEND_API_KEY", raising=False)
    monkeypatch.setenv("CONTACT_TO_EMAIL", "owner@example.com")
    assert not get_email_config().is_configured

    monkeypatch.setenv("RESEND_API_KEY", "re_key")
    monkeypatch.setenv("CONTACT_TO_EMAIL", "")
    assert not get_email_config().is_configured


def test_config_overrides(email_env, monkeypatch):
    monkeypatch.setenv("CONTACT_FROM_EMAIL", "Me <me@example.com>")
    monkeypatch.setenv("CONTACT_EMAIL_TIMEOUT_SECONDS", "3.5")
    config = get_email_config()
    assert config.from_email == "Me <me@example.com>"
    assert config.timeout == 3.5


def test_invalid_timeout_falls_back_to_default(email_env, monkeypatch):
    monkeypatch.setenv("CONTACT_EMAIL_TIMEOUT_SECONDS", "soon")
    assert get_email_config().timeout == 10.0


def test_build_contact_email(email_env):
    email = build_contact_email(make_submission(), get_email_config())
    payload = email.model_dump(by_alias=True)
    assert payload == {
        "from": DEFAULT_FROM_EMAIL,
        "to": ["owner@example.com"],
        "reply_to": "ada@example.com",
        "subject": "Portfolio Contact: Ada Lovelace",
        "text": "Name: Ada Lovelace\nEmail: ada@example.com\n\nMessage:\nLet's build an analytical engine.",
    }


def test_send_success(email_env, fake_provider):
    result = send_contact_email(make_submission(), get_email_config())
    assert result.success
    assert result.status_code == 200
    assert result.id == "email_123"

    assert len(fake_provider.calls) == 1
    call = fake_provider.calls[0]
    assert call["url"] == DEFAULT_RESEND_API_URL
    assert call["headers"]["Authorization"] == "Bearer re_test_key"
    assert call["timeout"] == 10.0
    assert call["json"]["reply_to"] == "ada@example.com"


def test_send_success_without_id(email_env, fake_provider):
    fake_provider.respond(200, {})
    result = send_contact_email(make_submission(), get_email_config())
    assert result.success
    assert result.id is None


def test_provider_error_message_is_relayed(email_env, fake_provider):
    fake_provider.respond(422, {"message": "Invalid `from` field."})
    result = send_contact_email(make_submission(), get_email_config())
    assert result.status_code == 502
    assert result.message == "Invalid `from` field."


def test_provider_error_without_message(email_env, fake_provider):
    fake_provider.respond(500, {"name": "internal_server_error"})
    result = send_contact_email(make_submission(), get_email_config())
    assert result.status_code == 502
    assert result.message == "Failed to deliver email."


def test_timeout_is_a_generic_failure(email_env, fake_provider):
    fake_provider.error = requests.Timeout("read timed out")
    result = send_contact_email(make_submission(), get_email_config())
    assert result.status_code == 500
    assert result.message == "Unable to process contact request."


def test_connection_error_is_a_generic_failure(email_env, fake_provider):
    fake_provider.error = requests.ConnectionError("refused")
    result = send_contact_email(make_submission(), get_email_config())
    assert result.status_code == 500


def test_unparseable_response_is_a_generic_failure(email_env, fake_provider):
    fake_provider.respond(200, raise_on_json=True)
    result = send_contact_email(make_submission(), get_email_config())
    assert result.status_code == 500
    assert result.message == "Unable to process contact request."
