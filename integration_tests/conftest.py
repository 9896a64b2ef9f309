"""Pytest configuration for integration tests."""

import pytest
from click.testing import CliRunner
from fastapi.testclient import TestClient

from gymkeep.cli import main
from gymkeep.config import reset_settings
from gymkeep.web import create_app

PASSWORD = "demo1234"


# Mark all tests in this directory as integration tests
def pytest_collection_modifyitems(items):
    """Add integration marker to all tests in this directory."""
    for item in items:
        if "integration_tests" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def demo_client(tmp_path, monkeypatch):
    """The API over a database filled by ``gymkeep seed-demo``."""
    monkeypatch.setenv("GYMKEEP_DATA_DIR", str(tmp_path))
    reset_settings()
    runner = CliRunner()
    for args in (
        ["init"],
        ["create-superadmin", "--email", "root@demo.gym", "--password", PASSWORD],
        ["seed-demo", "--password", PASSWORD],
    ):
        result = runner.invoke(main, args)
        assert result.exit_code == 0, result.output

    with TestClient(create_app()) as client:
        yield client
    reset_settings()


@pytest.fixture
def sign_in(demo_client):
    """Return auth headers for a demo account."""

    def _sign_in(email: str, gym_id: str | None = None) -> dict:
        response = demo_client.post(
            "/api/auth/login", json={"email": email, "password": PASSWORD}
        )
        assert response.status_code == 200, response.text
        headers = {"Authorization": f"Bearer {response.json()['data']['token']}"}
        if gym_id:
            headers["X-Gym-Id"] = gym_id
        return headers

    return _sign_in
