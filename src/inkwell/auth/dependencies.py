"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract
and validate the current identity from the request. The guard is a pure
gate: it reads the Authorization header, verifies the token, and either
rejects the request with 401 before the handler runs or hands the handler
a CurrentIdentity (also stored on request.state.identity).
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from fastapi import Depends, Request

from inkwell.auth.jwt import ACCESS, TokenError, TokenService, get_token_service
from inkwell.errors import Unauthorized

logger = structlog.get_logger("inkwell.auth")

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class CurrentIdentity:
    """The authenticated caller, as carried by a verified access token."""

    user_id: str
    email: Optional[str] = None


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` header.

    Raises Unauthorized if the header is absent or not a Bearer header.
    """
    if not authorization:
        raise Unauthorized("Authentication required")
    if not authorization.startswith(BEARER_PREFIX):
        raise Unauthorized("Invalid authorization header")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise Unauthorized("Invalid authorization header")
    return token


def authenticate(token: str, tokens: TokenService) -> CurrentIdentity:
    """Verify an access token and turn its claims into an identity."""
    try:
        payload = tokens.verify(token, ACCESS)
    except TokenError as e:
        logger.info("auth.token_rejected", reason=str(e))
        raise Unauthorized("Invalid or expired token")
    return CurrentIdentity(user_id=str(payload["sub"]), email=payload.get("email"))


async def get_current_user(
    request: Request,
    tokens: TokenService = Depends(get_token_service),
) -> CurrentIdentity:
    """Extract current identity (required — 401 if no valid token)."""
    token = extract_bearer_token(request.headers.get("Authorization"))
    identity = authenticate(token, tokens)
    request.state.identity = identity
    structlog.contextvars.bind_contextvars(user_id=identity.user_id)
    return identity
