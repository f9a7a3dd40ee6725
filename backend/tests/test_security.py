from http import HTTPStatus

from fastapi.testclient import TestClient

from meco.main import create_app


def test_payload_too_big(client: TestClient, settings):
    large_payload = b"x" * (settings.max_body_bytes + 1)

    response = client.post(
        "/webhooks/stripe",
        content=large_payload,
        headers={"Stripe-Signature": "t=1,v1=abc"},
    )

    assert response.status_code == 413
    assert response.json() == {
        "status": HTTPStatus.REQUEST_ENTITY_TOO_LARGE.name,
        "message": "Payload too large.",
    }


def test_body_limit_is_configurable(settings, billing, token_provider):
    small = settings.model_copy(update={"max_body_bytes": 16})
    client = TestClient(create_app(small, billing_service=billing, token_provider=token_provider))

    response = client.post(
        "/webhooks/stripe", content=b"{" + b" " * 32 + b"}", headers={"Stripe-Signature": "x"}
    )

    assert response.status_code == 413
    assert billing.method_calls == []


def test_cors_preflight_for_allowed_origin(client: TestClient):
    response = client.options(
        "/accounts/me",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "GET",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


def test_invalid_token_rejected_before_routing(client: TestClient):
    response = client.get("/does-not-exist", headers={"Authorization": "Bearer nope"})

    assert response.status_code == 401
    assert response.json()["status"] == "UNAUTHORIZED"
