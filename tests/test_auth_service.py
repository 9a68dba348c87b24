"""Authentication engine tests — login and refresh at the service layer."""

from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest

from inkwell.auth.jwt import REFRESH, TokenService
from inkwell.auth.password import verify_password
from inkwell.errors import ErrorKind, ServiceError
from inkwell.services.auth_service import (
    INVALID_REFRESH_TOKEN,
    AuthService,
    refresh_token_digest,
)

from conftest import DEFAULT_PASSWORD


@pytest.fixture
def auth(db_session, tokens):
    return AuthService(db_session, tokens)


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login_issues_tokens_for_user(auth, tokens, user_factory):
    user = await user_factory("alice@example.com")

    result = await auth.login("alice@example.com", DEFAULT_PASSWORD)

    assert result.message == "User logged in successfully"
    assert tokens.verify(result.access_token)["sub"] == user.id
    assert tokens.verify(result.refresh_token, REFRESH)["email"] == "alice@example.com"


@pytest.mark.asyncio
async def test_login_persists_refresh_token_hash(auth, user_factory):
    user = await user_factory()
    assert user.refresh_token_hash == ""

    result = await auth.login(user.email, DEFAULT_PASSWORD)

    stored = await auth.users.get(user.id)
    assert stored.refresh_token_hash
    assert result.refresh_token not in stored.refresh_token_hash
    assert verify_password(refresh_token_digest(result.refresh_token), stored.refresh_token_hash)


@pytest.mark.asyncio
async def test_login_unknown_email_is_not_found(auth):
    with pytest.raises(ServiceError) as exc:
        await auth.login("nobody@example.com", "whatever")
    assert exc.value.kind is ErrorKind.NOT_FOUND
    assert exc.value.message == "User not found"


@pytest.mark.asyncio
async def test_login_wrong_password_is_unauthorized(auth, user_factory):
    user = await user_factory()
    with pytest.raises(ServiceError) as exc:
        await auth.login(user.email, "wrong_password")
    assert exc.value.kind is ErrorKind.UNAUTHORIZED
    assert exc.value.message == "Invalid credentials"


@pytest.mark.asyncio
async def test_login_email_match_is_case_sensitive(auth, user_factory):
    await user_factory("Alice@example.com")
    with pytest.raises(ServiceError) as exc:
        await auth.login("alice@example.com", DEFAULT_PASSWORD)
    assert exc.value.kind is ErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_login_storage_failure_is_internal(auth):
    with patch.object(auth.users, "find_one", AsyncMock(side_effect=RuntimeError("db down"))):
        with pytest.raises(ServiceError) as exc:
            await auth.login("alice@example.com", DEFAULT_PASSWORD)
    assert exc.value.kind is ErrorKind.INTERNAL
    assert exc.value.message == "Error to login"
    assert "db down" not in exc.value.message


# ═══════════════════════════════════════════════════════════
# Refresh
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_refresh_returns_new_access_token(auth, tokens, user_factory):
    user = await user_factory()
    result = await auth.login(user.email, DEFAULT_PASSWORD)

    access = await auth.refresh_token(result.refresh_token)

    payload = tokens.verify(access)
    assert payload["sub"] == user.id
    assert payload["email"] == user.email


@pytest.mark.asyncio
async def test_refresh_does_not_rotate(auth, user_factory):
    user = await user_factory()
    result = await auth.login(user.email, DEFAULT_PASSWORD)

    await auth.refresh_token(result.refresh_token)
    # Same refresh token still works.
    assert await auth.refresh_token(result.refresh_token)


async def _refresh_error(auth, token) -> ServiceError:
    with pytest.raises(ServiceError) as exc:
        await auth.refresh_token(token)
    return exc.value


@pytest.mark.asyncio
async def test_refresh_failures_are_indistinguishable(auth, tokens, user_factory):
    """Expired, malformed, tampered and superseded tokens all fail the same way."""
    user = await user_factory()
    first = await auth.login(user.email, DEFAULT_PASSWORD)
    await auth.login(user.email, DEFAULT_PASSWORD)  # supersedes `first`

    claims = {"sub": user.id, "email": user.email}
    expired = tokens.issue_refresh_token(claims, expires_in=timedelta(seconds=-5))
    tampered = first.refresh_token[:-4] + ("AAAA" if not first.refresh_token.endswith("AAAA") else "BBBB")

    errors = [
        await _refresh_error(auth, expired),
        await _refresh_error(auth, "not.a.jwt"),
        await _refresh_error(auth, tampered),
        await _refresh_error(auth, first.refresh_token),
    ]

    assert {e.kind for e in errors} == {ErrorKind.UNAUTHORIZED}
    assert {e.message for e in errors} == {INVALID_REFRESH_TOKEN}


@pytest.mark.asyncio
async def test_refresh_unknown_subject_rejected(auth, tokens):
    token = tokens.issue_refresh_token({"sub": "ghost", "email": "ghost@example.com"})
    err = await _refresh_error(auth, token)
    assert err.kind is ErrorKind.UNAUTHORIZED
    assert err.message == INVALID_REFRESH_TOKEN


@pytest.mark.asyncio
async def test_refresh_before_any_login_rejected(auth, tokens, user_factory):
    user = await user_factory()
    token = tokens.issue_refresh_token({"sub": user.id, "email": user.email})
    err = await _refresh_error(auth, token)
    assert err.message == INVALID_REFRESH_TOKEN


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(auth, user_factory):
    user = await user_factory()
    result = await auth.login(user.email, DEFAULT_PASSWORD)
    err = await _refresh_error(auth, result.access_token)
    assert err.message == INVALID_REFRESH_TOKEN


@pytest.mark.asyncio
async def test_refresh_storage_failure_collapses_to_unauthorized(auth, user_factory):
    user = await user_factory()
    result = await auth.login(user.email, DEFAULT_PASSWORD)

    with patch.object(auth.users, "get", AsyncMock(side_effect=RuntimeError("db down"))):
        err = await _refresh_error(auth, result.refresh_token)
    assert err.kind is ErrorKind.UNAUTHORIZED
    assert err.message == INVALID_REFRESH_TOKEN


@pytest.mark.asyncio
async def test_refresh_signed_by_other_secret_rejected(auth, user_factory):
    user = await user_factory()
    foreign = TokenService(secret="someone-elses-secret").issue_refresh_token(
        {"sub": user.id, "email": user.email}
    )
    err = await _refresh_error(auth, foreign)
    assert err.message == INVALID_REFRESH_TOKEN
