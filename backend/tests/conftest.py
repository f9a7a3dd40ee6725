import hashlib
import hmac
import json
import logging
import os
import time
from typing import Any, Callable
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

# Set test environment variables
os.environ.update(
    {
        "JWT_SECRET_KEY": "test-jwt-secret-key-with-enough-length",
        "STRIPE_WEBHOOK_SECRET": "whsec_test",
        "ALLOWED_ORIGINS": "http://localhost:3000",
        "LOG_LEVEL": "DEBUG",
    }
)

# Import app modules after setting environment variables
from meco.billing.service import BillingService
from meco.core.config import Settings, get_settings
from meco.main import create_app
from meco.security.jwt_provider import JwtTokenProvider
from meco.webhook.service import WebhookService

logger = logging.getLogger(__name__)


@pytest.fixture
def settings() -> Settings:
    return get_settings()


@pytest.fixture
def token_provider(settings: Settings) -> JwtTokenProvider:
    return JwtTokenProvider.from_settings(settings)


@pytest.fixture
def billing() -> MagicMock:
    return MagicMock(spec=BillingService)


@pytest.fixture
def webhook_service(billing: MagicMock, settings: Settings) -> WebhookService:
    return WebhookService.from_settings(billing, settings)


@pytest.fixture
def app(settings: Settings, billing: MagicMock, token_provider: JwtTokenProvider):
    return create_app(settings, billing_service=billing, token_provider=token_provider)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        logger.info("Test client created")
        yield test_client


@pytest.fixture
def stripe_header() -> Callable[[bytes, str], str]:
    def _stripe_header(body: bytes, secret: str) -> str:
        ts = int(time.time())
        payload = f"{ts}.{body.decode()}".encode("utf-8")
        sig = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()
        return f"t={ts},v1={sig}"

    return _stripe_header


@pytest.fixture
def stripe_event() -> Callable[..., bytes]:
    def _stripe_event(event_type: str, obj: dict[str, Any] | None = None, **extra) -> bytes:
        event = {
            "id": "evt_123",
            "object": "event",
            "type": event_type,
            "api_version": "2024-06-20",
            "data": {"object": obj} if obj is not None else {},
            **extra,
        }
        return json.dumps(event).encode()

    return _stripe_event


@pytest.fixture
def invoice() -> dict[str, Any]:
    return {
        "id": "in_123",
        "object": "invoice",
        "number": "MECO-0001",
        "customer": "cus_123",
        "subscription": "sub_123",
    }


@pytest.fixture
def subscription() -> dict[str, Any]:
    return {
        "id": "sub_123",
        "object": "subscription",
        "customer": "cus_123",
        "status": "canceled",
    }
