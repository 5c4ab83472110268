"""Login rate limiting through Flask-Limiter."""

from __future__ import annotations

import pytest

from algoshield.core.config import TestingConfig
from helpers.auth import LOGIN_URL
from helpers.http import assert_error, json_headers


class RateLimitedConfig(TestingConfig):
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = "memory://"
    AUTH_LOGIN_RATE_LIMIT = "2 per minute"


@pytest.fixture()
def app_config():
    return RateLimitedConfig


def test_login_is_rate_limited(client):
    payload = {"email": "ghost@example.com", "password": "whatever"}

    for _ in range(2):
        assert_error(client.post(LOGIN_URL, json=payload, headers=json_headers()), 401, "INVALID_CREDENTIALS")

    body = assert_error(client.post(LOGIN_URL, json=payload, headers=json_headers()), 429, "RATE_LIMIT_EXCEEDED")
    assert body["message"] == "Too many requests"


def test_other_endpoints_are_not_limited(client):
    for _ in range(5):
        assert client.get("/api/v1/ready").status_code == 200
