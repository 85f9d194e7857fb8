"""Shared fixtures for contact gate tests."""

import time
import pytest
from fastapi.testclient import TestClient

from src.app import app
from src.shared.contact import email_utils
from src.shared.contact.rate_limit import ContactRateLimiter, get_rate_limiter


class FakeResponse:
    def __init__(self, status_code=200, body=None, raise_on_json=False):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self._body = body
        self._raise_on_json = raise_on_json

    def json(self):
        if self._raise_on_json:
            raise ValueError("Expecting value")
        return self._body


class FakeProvider:
    """Stands in for requests.post and records every outbound call."""

    def __init__(self):
        self.calls = []
        self.response = FakeResponse(200, {"id": "email_123"})
        self.error = None

    def respond(self, status_code, body=None, raise_on_json=False):
        self.response = FakeResponse(status_code, body, raise_on_json)

    def __call__(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def fake_provider(monkeypatch):
    provider = FakeProvider()
    monkeypatch.setattr(email_utils.requests, "post", provider)
    return provider


@pytest.fixture
def email_env(monkeypatch):
    monkeypatch.setenv("RESEND_API_KEY", "re_test_key")
    monkeypatch.setenv("CONTACT_TO_EMAIL", "owner@example.com")
    monkeypatch.delenv("CONTACT_FROM_EMAIL", raising=False)
    monkeypatch.delenv("RESEND_API_URL", raising=False)
    monkeypatch.delenv("CONTACT_EMAIL_TIMEOUT_SECONDS", raising=False)


@pytest.fixture
def limiter():
    return ContactRateLimiter()


@pytest.fixture
def client(limiter):
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_rate_limiter, None)


@pytest.fixture
def valid_payload():
    return {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "message": "I would like to talk about your projects.",
        "website": "",
        "humanCheck": "7",
        "formStartedAt": time.time() * 1000 - 10_000,
    }
