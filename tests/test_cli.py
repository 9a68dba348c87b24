"""CLI tests — click commands against a mocked HTTP transport."""

import json

import httpx
import pytest
from click.testing import CliRunner

from inkwell.cli import main as cli_main


@pytest.fixture
def creds_path(tmp_path, monkeypatch):
    path = tmp_path / "credentials.json"
    monkeypatch.setattr(cli_main, "CREDENTIALS_PATH", path)
    return path


@pytest.fixture
def mock_api(monkeypatch):
    """Route the CLI's httpx client through a handler the test controls."""
    calls = []
    routes = {}

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        status, body = routes[(request.method, request.url.path)]
        return httpx.Response(status, json=body)

    def _client():
        return httpx.Client(
            base_url="http://inkwell.test/api/v1", transport=httpx.MockTransport(handler)
        )

    monkeypatch.setattr(cli_main, "_client", _client)
    return routes, calls


def test_login_saves_tokens(creds_path, mock_api, tokens):
    routes, calls = mock_api
    access = tokens.issue_access_token({"sub": "u1", "email": "a@example.com"})
    routes[("POST", "/api/v1/auth/login")] = (
        200,
        {"message": "User logged in successfully", "access_token": access, "refresh_token": "r1"},
    )

    result = CliRunner().invoke(
        cli_main.cli, ["login", "a@example.com", "--password", "password_123"]
    )

    assert result.exit_code == 0, result.output
    assert "User logged in successfully" in result.output
    assert json.loads(creds_path.read_text()) == {"access_token": access, "refresh_token": "r1"}
    assert json.loads(calls[0].content) == {"email": "a@example.com", "password": "password_123"}


def test_login_failure_exits_nonzero(creds_path, mock_api):
    routes, _ = mock_api
    routes[("POST", "/api/v1/auth/login")] = (401, {"detail": "Invalid credentials"})

    result = CliRunner().invoke(cli_main.cli, ["login", "a@example.com", "--password", "nope"])

    assert result.exit_code == 1
    assert "Invalid credentials" in result.output
    assert not creds_path.exists()


def test_refresh_updates_access_token(creds_path, mock_api):
    routes, calls = mock_api
    creds_path.write_text(json.dumps({"access_token": "old", "refresh_token": "r1"}))
    routes[("POST", "/api/v1/auth/refresh")] = (200, {"access_token": "new"})

    result = CliRunner().invoke(cli_main.cli, ["refresh"])

    assert result.exit_code == 0, result.output
    assert json.loads(creds_path.read_text())["access_token"] == "new"
    assert json.loads(calls[0].content) == {"refresh_token": "r1"}


def test_whoami_without_credentials(creds_path):
    result = CliRunner().invoke(cli_main.cli, ["whoami"])
    assert result.exit_code == 1
    assert "not logged in" in result.output


def test_corrupt_credentials_reported(creds_path):
    creds_path.write_text("{not json")

    result = CliRunner().invoke(cli_main.cli, ["refresh"])

    assert result.exit_code == 1
    assert "credentials file is corrupt" in result.output
    assert not isinstance(result.exception, json.JSONDecodeError)


def test_whoami_shows_claims_and_profile(creds_path, mock_api, tokens):
    routes, calls = mock_api
    access = tokens.issue_access_token({"sub": "u1", "email": "a@example.com"})
    creds_path.write_text(json.dumps({"access_token": access, "refresh_token": "r1"}))
    routes[("GET", "/api/v1/users/profile")] = (200, {"id": "u1", "email": "a@example.com"})

    result = CliRunner().invoke(cli_main.cli, ["whoami"])

    assert result.exit_code == 0, result.output
    assert "sub=u1 email=a@example.com" in result.output
    assert calls[0].headers["Authorization"] == f"Bearer {access}"


def test_register_posts_user(mock_api):
    routes, calls = mock_api
    routes[("POST", "/api/v1/users")] = (201, {"id": "u1", "email": "a@example.com"})

    result = CliRunner().invoke(
        cli_main.cli,
        ["register", "a@example.com", "--fname", "Ada", "--lname", "L"],
        input="password_123\npassword_123\n",
    )

    assert result.exit_code == 0, result.output
    assert "Registered a@example.com" in result.output
    assert json.loads(calls[0].content)["fname"] == "Ada"
