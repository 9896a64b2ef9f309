"""Tests for the HTTP layer: envelope, auth and permission checks."""

import pytest
from click.testing import CliRunner
from fastapi.testclient import TestClient

from gymkeep.cli import main
from gymkeep.config import reset_settings
from gymkeep.web import create_app

ROOT_EMAIL = "root@gymkeep.test"
PASSWORD = "secret123"


@pytest.fixture
def client(tmp_path, monkeypatch):
    """An app over a fresh data directory with one super admin."""
    monkeypatch.setenv("GYMKEEP_DATA_DIR", str(tmp_path))
    reset_settings()
    runner = CliRunner()
    assert runner.invoke(main, ["init"]).exit_code == 0
    result = runner.invoke(
        main, ["create-superadmin", "--email", ROOT_EMAIL, "--password", PASSWORD]
    )
    assert result.exit_code == 0, result.output

    with TestClient(create_app()) as test_client:
        yield test_client
    reset_settings()


def token_for(client, email, password=PASSWORD):
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["data"]["token"]


def bearer(token, gym_id=None):
    headers = {"Authorization": f"Bearer {token}"}
    if gym_id:
        headers["X-Gym-Id"] = gym_id
    return headers


@pytest.fixture
def gym(client):
    """A gym created over HTTP, with its owner's token."""
    root = token_for(client, ROOT_EMAIL)
    response = client.post(
        "/api/gyms",
        json={
            "name": "Iron Temple",
            "owner": {
                "email": "owner@iron.test",
                "password": PASSWORD,
                "firstName": "Olga",
                "lastName": "Owner",
            },
        },
        headers=bearer(root),
    )
    assert response.status_code == 201, response.text
    return {
        "id": response.json()["data"]["id"],
        "root": root,
        "owner": token_for(client, "owner@iron.test"),
    }


def role_id(client, token, name):
    roles = client.get("/api/roles", headers=bearer(token)).json()["data"]
    return next(role["id"] for role in roles if role["name"] == name)


def register(client, token, email, role_name):
    response = client.post(
        "/api/users",
        json={
            "email": email,
            "password": PASSWORD,
            "firstName": "Test",
            "lastName": role_name,
            "roleId": role_id(client, token, role_name),
        },
        headers=bearer(token),
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestEnvelope:
    """Tests for the response envelope."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_missing_token_is_401(self, client):
        response = client.get("/api/users")

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Authentication required"}

    def test_bad_token_is_401(self, client):
        response = client.get("/api/auth/me", headers=bearer("not-a-token"))

        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_bad_credentials(self, client):
        response = client.post(
            "/api/auth/login", json={"email": ROOT_EMAIL, "password": "wrong"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    def test_validation_errors_use_the_envelope(self, client):
        response = client.post("/api/auth/login", json={"email": ROOT_EMAIL})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert "password" in body["message"]

    def test_login_payload_is_camel_case(self, client, gym):
        response = client.post(
            "/api/auth/login", json={"email": "owner@iron.test", "password": PASSWORD}
        )

        data = response.json()["data"]
        assert response.json()["message"] == "Login successful"
        assert data["user"]["firstName"] == "Olga"
        assert data["user"]["gymId"] == gym["id"]
        assert "expiresAt" in data


class TestAccessControl:
    """Tests for permission and tenant checks over HTTP."""

    def test_missing_permission_is_403(self, client, gym):
        register(client, gym["owner"], "student@iron.test", "Student")
        student = token_for(client, "student@iron.test")

        response = client.get("/api/users", headers=bearer(student))

        assert response.status_code == 403
        assert response.json()["message"] == "Missing permission: users.read"

    def test_super_admin_needs_gym_header(self, client, gym):
        without = client.get("/api/users", headers=bearer(gym["root"]))
        scoped = client.get("/api/users", headers=bearer(gym["root"], gym["id"]))

        assert without.status_code == 400
        assert "X-Gym-Id" in without.json()["message"]
        assert scoped.status_code == 200
        assert [u["email"] for u in scoped.json()["data"]] == ["owner@iron.test"]

    def test_owner_cannot_create_gyms(self, client, gym):
        response = client.post("/api/gyms", json={"name": "Rogue"}, headers=bearer(gym["owner"]))

        assert response.status_code == 403

    def test_logout_ends_session(self, client, gym):
        client.post("/api/auth/logout", headers=bearer(gym["owner"]))

        response = client.get("/api/auth/me", headers=bearer(gym["owner"]))
        assert response.status_code == 401


class TestResources:
    """Tests for list and create endpoints."""

    def test_pagination_block(self, client, gym):
        register(client, gym["owner"], "trainer@iron.test", "Trainer")
        register(client, gym["owner"], "student@iron.test", "Student")

        response = client.get("/api/users?page=2&limit=2", headers=bearer(gym["owner"]))

        body = response.json()
        assert body["pagination"] == {"total": 3, "page": 2, "limit": 2, "totalPages": 2}
        assert len(body["data"]) == 1

    def test_duplicate_email_is_409(self, client, gym):
        register(client, gym["owner"], "student@iron.test", "Student")

        response = client.post(
            "/api/users",
            json={
                "email": "student@iron.test",
                "password": PASSWORD,
                "firstName": "Again",
                "lastName": "Student",
                "roleId": role_id(client, gym["owner"], "Student"),
            },
            headers=bearer(gym["owner"]),
        )

        assert response.status_code == 409
        assert response.json()["message"] == "Email already registered"

    def test_money_is_serialized_as_string(self, client, gym):
        headers = bearer(gym["owner"])
        category = client.post(
            "/api/product-categories", json={"name": "Drinks"}, headers=headers
        ).json()["data"]

        response = client.post(
            "/api/products",
            json={
                "categoryId": category["id"],
                "name": "Electrolytes",
                "price": "3.5",
                "stockQuantity": 12,
            },
            headers=headers,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["price"] == "3.50"
        assert data["stockQuantity"] == 12

    def test_unknown_resource_is_404(self, client, gym):
        response = client.get("/api/programs/nope", headers=bearer(gym["owner"]))

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Program not found"}


def create_product(client, headers, stock=10):
    category = client.post(
        "/api/product-categories", json={"name": "Supplements"}, headers=headers
    ).json()["data"]
    response = client.post(
        "/api/products",
        json={
            "categoryId": category["id"],
            "name": "Creatine",
            "price": "19.90",
            "stockQuantity": stock,
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestPartialUpdates:
    """Tests for update bodies that clear fields."""

    def test_null_price_is_rejected(self, client, gym):
        headers = bearer(gym["owner"])
        product = create_product(client, headers)

        response = client.put(
            f"/api/products/{product['id']}", json={"price": None}, headers=headers
        )

        assert response.status_code == 400
        assert "price cannot be null" in response.json()["message"]
        unchanged = client.get(f"/api/products/{product['id']}", headers=headers)
        assert unchanged.json()["data"]["price"] == "19.90"

    def test_null_sets_is_rejected(self, client, gym):
        headers = bearer(gym["owner"])
        exercise = client.post(
            "/api/exercises", json={"name": "Pull-up"}, headers=headers
        ).json()["data"]
        program = client.post(
            "/api/programs", json={"name": "Back Day"}, headers=headers
        ).json()["data"]
        base = f"/api/programs/{program['id']}/exercises"
        entry = client.post(
            base, json={"exerciseId": exercise["id"], "sets": 3, "reps": "8"}, headers=headers
        ).json()["data"]

        response = client.put(f"{base}/{entry['id']}", json={"sets": None}, headers=headers)

        assert response.status_code == 400
        assert "sets cannot be null" in response.json()["message"]

    def test_nullable_fields_can_be_cleared(self, client, gym):
        headers = bearer(gym["owner"])
        product = create_product(client, headers)
        client.put(
            f"/api/products/{product['id']}", json={"description": "5g daily"}, headers=headers
        )

        response = client.put(
            f"/api/products/{product['id']}", json={"description": None}, headers=headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["description"] is None


class TestOrderMetadata:
    def test_metadata_replaced_or_kept(self, client, gym):
        headers = bearer(gym["owner"])
        product = create_product(client, headers)
        order = client.post(
            "/api/orders",
            json={
                "items": [{"productId": product["id"], "quantity": 2}],
                "metadata": {"notes": "For the front desk", "priority": 1},
            },
            headers=headers,
        ).json()["data"]
        assert order["metadata"] == {"notes": "For the front desk", "priority": 1}

        prepared = client.patch(
            f"/api/orders/{order['id']}/status",
            json={"status": "prepared", "metadata": {"shelf": "B2", "tags": ["gift"]}},
            headers=headers,
        ).json()["data"]
        completed = client.patch(
            f"/api/orders/{order['id']}/status", json={"status": "completed"}, headers=headers
        ).json()["data"]

        assert prepared["metadata"] == {"shelf": "B2", "tags": ["gift"]}
        assert completed["status"] == "completed"
        assert completed["metadata"] == {"shelf": "B2", "tags": ["gift"]}
