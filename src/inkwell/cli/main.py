"""Inkwell CLI — run the server and talk to it.

Usage:
    inkwell serve                              # Run the API with uvicorn
    inkwell init-db                            # Create tables
    inkwell register alice@example.com         # Create an account (prompts for password)
    inkwell login alice@example.com            # Store tokens in ~/.inkwell/credentials.json
    inkwell refresh                            # Swap the stored refresh token for a new access token
    inkwell whoami                             # Show the stored identity and the server's profile
"""

from __future__ import annotations

import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Optional

import click
import httpx

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"
CREDENTIALS_PATH = Path.home() / ".inkwell" / "credentials.json"


def _api_url() -> str:
    return os.environ.get("INKWELL_API_URL", DEFAULT_API_URL).rstrip("/")


def _client() -> httpx.Client:
    return httpx.Client(base_url=f"{_api_url()}/api/v1", timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _fail(message: str) -> None:
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


def _detail(resp: httpx.Response) -> str:
    try:
        return str(resp.json().get("detail", resp.text))
    except ValueError:
        return resp.text


def _load_credentials(path: Optional[Path] = None) -> dict:
    path = path or CREDENTIALS_PATH
    if not path.exists():
        _fail("not logged in (run `inkwell login EMAIL`)")
    try:
        return json.loads(path.read_text())
    except ValueError:
        _fail("credentials file is corrupt; run `inkwell login`")


def _save_credentials(data: dict, path: Optional[Path] = None) -> None:
    path = path or CREDENTIALS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2))
    path.chmod(0o600)


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@click.group()
def cli() -> None:
    """Inkwell — blogging backend."""


@cli.command()
@click.option("--host", default=None, help="Bind address (default: INKWELL_HOST)")
@click.option("--port", default=None, type=int, help="Port (default: INKWELL_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool) -> None:
    """Run the API server."""
    import uvicorn

    from inkwell.config import settings

    uvicorn.run(
        "inkwell.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@cli.command("init-db")
def init_db() -> None:
    """Create any missing tables."""
    from inkwell.db.engine import engine, init_models

    async def _init() -> None:
        await init_models(engine)
        await engine.dispose()

    asyncio.run(_init())
    click.secho("Tables ready.", fg="green")


@cli.command()
@click.argument("email")
@click.option("--fname", prompt="First name")
@click.option("--lname", prompt="Last name")
@click.option("--phone", default="")
@click.password_option()
def register(email: str, fname: str, lname: str, phone: str, password: str) -> None:
    """Create a new account."""
    with _client() as client:
        resp = client.post(
            "/users",
            json={
                "email": email,
                "fname": fname,
                "lname": lname,
                "phone": phone,
                "password": password,
            },
        )
    if resp.status_code != 201:
        _fail(_detail(resp))
    click.secho(f"Registered {email} (id {resp.json()['id']})", fg="green")


@cli.command()
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True)
def login(email: str, password: str) -> None:
    """Log in and store the token pair locally."""
    with _client() as client:
        resp = client.post("/auth/login", json={"email": email, "password": password})
    if resp.status_code != 200:
        _fail(_detail(resp))
    body = resp.json()
    _save_credentials(
        {"access_token": body["access_token"], "refresh_token": body["refresh_token"]}
    )
    click.secho(body.get("message", "Logged in"), fg="green")


@cli.command()
def refresh() -> None:
    """Get a new access token with the stored refresh token."""
    creds = _load_credentials()
    with _client() as client:
        resp = client.post("/auth/refresh", json={"refresh_token": creds["refresh_token"]})
    if resp.status_code != 200:
        _fail(_detail(resp))
    creds["access_token"] = resp.json()["access_token"]
    _save_credentials(creds)
    click.secho("Access token refreshed.", fg="green")


@cli.command()
def whoami() -> None:
    """Show the stored identity and the server's view of it."""
    from inkwell.auth.jwt import TokenError, decode_unverified

    creds = _load_credentials()
    # Our own stored token: its origin is trusted, so no signature check.
    try:
        claims = decode_unverified(creds["access_token"])
    except TokenError as e:
        _fail(str(e))
    click.echo(f"Local token: sub={claims.get('sub')} email={claims.get('email')}")

    with _client() as client:
        resp = client.get(
            "/users/profile",
            headers={"Authorization": f"Bearer {creds['access_token']}"},
        )
    if resp.status_code != 200:
        _fail(_detail(resp))
    click.echo(_pretty_json(resp.json()))


if __name__ == "__main__":
    cli()
