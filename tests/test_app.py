from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from datastore.mock_table import MockTableStore, build_store
from services.tokens import TokenClaims
from settings import ConfigurationError, Settings

_SECRET = "test-signing-secret-0123456789abcdef"


@pytest.fixture
def settings() -> Settings:
    return Settings(jwt_secret=_SECRET, password_rounds=4)


@pytest.fixture
def api_client(settings: Settings) -> Iterator[TestClient]:
    app = create_app(settings=settings, store=build_store(settings))
    with TestClient(app) as client:
        yield client


def _register(
    client: TestClient,
    email: str = "ada@example.com",
    password: str = "secret123",
    name: str = "Ada",
):
    return client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "name": name},
    )


def _auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def test_create_app_requires_signing_secret(monkeypatch) -> None:
    monkeypatch.delenv("JWT_SECRET", raising=False)

    with pytest.raises(ConfigurationError):
        create_app()


def test_healthcheck(api_client: TestClient) -> None:
    response = api_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_register_returns_user_and_token(api_client: TestClient) -> None:
    response = _register(api_client)

    assert response.status_code == 201
    body = response.json()
    assert set(body.keys()) == {"user", "token"}
    assert body["user"]["email"] == "ada@example.com"
    assert body["user"]["name"] == "Ada"
    assert body["user"]["id"]
    assert body["user"]["created_at"]
    assert "password_hash" not in body["user"]
    assert isinstance(body["token"], str) and body["token"]


@pytest.mark.parametrize(
    "payload",
    [
        {"password": "secret123", "name": "Ada"},
        {"email": "ada@example.com", "name": "Ada"},
        {"email": "ada@example.com", "password": "secret123"},
        {"email": "", "password": "secret123", "name": "Ada"},
        {},
    ],
)
def test_register_missing_fields_is_bad_request(api_client: TestClient, payload: dict) -> None:
    response = api_client.post("/api/auth/register", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "Email, password, and name are required"}


@pytest.mark.parametrize(
    "email",
    ["plainaddress", "missing-at.example.com", "user@nodot", "user @example.com", "@example.com"],
)
def test_register_rejects_malformed_email(api_client: TestClient, email: str) -> None:
    response = _register(api_client, email=email)

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid email format"}


def test_register_rejects_short_password(api_client: TestClient) -> None:
    response = _register(api_client, password="12345")

    assert response.status_code == 400
    assert response.json() == {"error": "Password must be at least 6 characters"}


def test_register_duplicate_email_is_conflict(api_client: TestClient) -> None:
    first = _register(api_client)
    second = _register(api_client, password="another-password", name="Impostor")

    assert first.status_code == 201
    assert second.status_code == 400
    assert second.json() == {"error": "Email already exists"}

    login = api_client.post(
        "/api/auth/login",
        json={"email": "ada@example.com", "password": "secret123"},
    )
    assert login.status_code == 200
    assert login.json()["user"] == first.json()["user"]


def test_register_without_json_body_is_bad_request(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/auth/register",
        content="not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert "error" in response.json()


def test_login_returns_token_for_valid_credentials(api_client: TestClient) -> None:
    registered = _register(api_client).json()

    response = api_client.post(
        "/api/auth/login",
        json={"email": "ada@example.com", "password": "secret123"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["id"] == registered["user"]["id"]
    assert "password_hash" not in body["user"]
    assert body["token"]


def test_login_missing_fields_is_bad_request(api_client: TestClient) -> None:
    response = api_client.post("/api/auth/login", json={"email": "ada@example.com"})

    assert response.status_code == 400
    assert response.json() == {"error": "Email and password are required"}


def test_login_failures_are_indistinguishable(api_client: TestClient) -> None:
    _register(api_client)

    wrong_password = api_client.post(
        "/api/auth/login",
        json={"email": "ada@example.com", "password": "wrong-password"},
    )
    unknown_email = api_client.post(
        "/api/auth/login",
        json={"email": "nobody@example.com", "password": "secret123"},
    )

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {"error": "Invalid credentials"}


def test_profile_resolves_token_to_same_user(api_client: TestClient) -> None:
    registered = _register(api_client).json()
    logged_in = api_client.post(
        "/api/auth/login",
        json={"email": "ada@example.com", "password": "secret123"},
    ).json()

    for token in (registered["token"], logged_in["token"]):
        response = api_client.get("/api/auth/profile", headers=_auth_header(token))
        assert response.status_code == 200
        assert response.json()["user"]["id"] == registered["user"]["id"]
        assert "password_hash" not in response.json()["user"]


def test_profile_without_token_is_unauthorized(api_client: TestClient) -> None:
    response = api_client.get("/api/auth/profile")

    assert response.status_code == 401
    assert response.json() == {"error": "Access token required"}


def test_profile_with_invalid_token_is_forbidden(api_client: TestClient) -> None:
    response = api_client.get("/api/auth/profile", headers=_auth_header("not-a-token"))

    assert response.status_code == 403
    assert response.json() == {"error": "Invalid or expired token"}


def test_profile_for_unknown_user_is_not_found(api_client: TestClient) -> None:
    tokens = api_client.app.state.token_service
    token = tokens.issue(TokenClaims(id="missing-user", email="ghost@example.com"))

    response = api_client.get("/api/auth/profile", headers=_auth_header(token))

    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}


def test_list_readings_on_empty_table(api_client: TestClient) -> None:
    response = api_client.get("/api/readings", params={"page": 1, "limit": 10})

    assert response.status_code == 200
    assert response.json() == {
        "data": [],
        "pagination": {"page": 1, "limit": 10, "total": 0, "totalPages": 0},
    }


@pytest.mark.parametrize(
    "params",
    [{"limit": 0}, {"limit": 101}, {"page": 0}, {"page": -3}, {"page": "abc"}],
)
def test_list_readings_rejects_invalid_pagination(api_client: TestClient, params: dict) -> None:
    response = api_client.get("/api/readings", params=params)

    assert response.status_code == 400
    assert "error" in response.json()


def test_list_readings_pages_newest_first(api_client: TestClient) -> None:
    for temperature in (20.0, 21.0, 22.0):
        assert api_client.post("/api/readings", json={"temperature": temperature}).status_code == 201

    first_page = api_client.get("/api/readings", params={"page": 1, "limit": 2}).json()
    second_page = api_client.get("/api/readings", params={"page": 2, "limit": 2}).json()

    assert [row["temperature"] for row in first_page["data"]] == [22.0, 21.0]
    assert [row["temperature"] for row in second_page["data"]] == [20.0]
    assert first_page["pagination"] == {"page": 1, "limit": 2, "total": 3, "totalPages": 2}


def test_latest_reading_on_empty_table_is_null(api_client: TestClient) -> None:
    response = api_client.get("/api/readings/latest")

    assert response.status_code == 200
    assert response.json() is None


def test_latest_reading_returns_most_recent(api_client: TestClient) -> None:
    api_client.post("/api/readings", json={"temperature": 18})
    api_client.post("/api/readings", json={"temperature": 19.5, "threshold_value": 25})

    response = api_client.get("/api/readings/latest")

    assert response.status_code == 200
    body = response.json()
    assert body["temperature"] == 19.5
    assert body["threshold_value"] == 25.0


def test_create_reading(api_client: TestClient) -> None:
    response = api_client.post("/api/readings", json={"temperature": 21.5})

    assert response.status_code == 201
    body = response.json()
    assert body["temperature"] == 21.5
    assert body["threshold_value"] is None
    assert body["id"]
    assert body["recorded_at"]


@pytest.mark.parametrize("temperature", ["hot", None, True, "21.5", [21.5], 10**400])
def test_create_reading_rejects_non_numeric_temperature(api_client: TestClient, temperature) -> None:
    response = api_client.post("/api/readings", json={"temperature": temperature})

    assert response.status_code == 400
    assert response.json() == {"error": "temperature must be a number"}


def test_create_reading_rejects_non_numeric_threshold(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/readings", json={"temperature": 20, "threshold_value": "high"}
    )

    assert response.status_code == 400
    assert response.json() == {"error": "threshold_value must be a number"}


def test_create_threshold_requires_token(api_client: TestClient) -> None:
    missing = api_client.post("/api/thresholds", json={"threshold_value": 30})
    invalid = api_client.post(
        "/api/thresholds",
        json={"threshold_value": 30},
        headers=_auth_header("garbage"),
    )

    assert missing.status_code == 401
    assert invalid.status_code == 403
    assert api_client.get("/api/thresholds/latest").json() is None


def test_threshold_lifecycle(api_client: TestClient) -> None:
    token = _register(api_client).json()["token"]

    assert api_client.get("/api/thresholds/latest").json() is None
    for value in (28, 30.5):
        created = api_client.post(
            "/api/thresholds",
            json={"threshold_value": value},
            headers=_auth_header(token),
        )
        assert created.status_code == 201

    latest = api_client.get("/api/thresholds/latest")
    listing = api_client.get("/api/thresholds")

    assert latest.json()["threshold_value"] == 30.5
    assert [row["threshold_value"] for row in listing.json()["data"]] == [30.5, 28.0]
    assert listing.json()["pagination"] == {
        "page": 1,
        "limit": 10,
        "total": 2,
        "totalPages": 1,
    }


def test_create_threshold_rejects_non_numeric_value(api_client: TestClient) -> None:
    token = _register(api_client).json()["token"]

    response = api_client.post(
        "/api/thresholds",
        json={"threshold_value": "warm"},
        headers=_auth_header(token),
    )

    assert response.status_code == 400
    assert response.json() == {"error": "threshold_value must be a number"}


def test_create_threshold_rejects_number_too_large_for_float(api_client: TestClient) -> None:
    token = _register(api_client).json()["token"]

    response = api_client.post(
        "/api/thresholds",
        json={"threshold_value": 10**400},
        headers=_auth_header(token),
    )

    assert response.status_code == 400
    assert response.json() == {"error": "threshold_value must be a number"}


def test_plain_store_keeps_user_schema(settings: Settings) -> None:
    store = MockTableStore()
    app = create_app(settings=settings, store=store)

    with TestClient(app) as client:
        first = _register(client)
        second = _register(client)

    assert first.status_code == 201
    assert first.json()["user"]["created_at"]
    assert second.status_code == 400
    assert second.json() == {"error": "Email already exists"}
    assert store.table("users").count() == 1
