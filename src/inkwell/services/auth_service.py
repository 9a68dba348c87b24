"""Authentication engine — login and access-token refresh.

Learn: Login is a four-step pipeline:
1. Look up the user by exact email
2. Verify the password against the stored bcrypt hash
3. Issue an access + refresh token pair carrying {sub, email}
4. Store a hash of the refresh token on the user, replacing any previous
   one — so only the latest login's refresh token stays usable

Login distinguishes "no such user" (NotFound) from "wrong password"
(Unauthorized). Refresh does the opposite on purpose: every failure, for
whatever reason, is the same Unauthorized("Invalid refresh token") so the
endpoint cannot be used as an oracle.

The refresh token is NOT rotated on refresh; it stays valid until the next
login overwrites its hash or it expires.
"""

import hashlib
from dataclasses import dataclass
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth.jwt import REFRESH, TokenService
from inkwell.auth.password import hash_password, verify_password
from inkwell.db.models import User
from inkwell.db.store import DocumentStore
from inkwell.errors import NotFound, Unauthorized, service_boundary
from inkwell.log import get_logger

INVALID_REFRESH_TOKEN = "Invalid refresh token"


@dataclass(frozen=True)
class LoginResult:
    message: str
    access_token: str
    refresh_token: str


def refresh_token_digest(token: str) -> str:
    """SHA-256 of a refresh token, the value that gets bcrypt-hashed.

    bcrypt only reads the first 72 bytes of its input, and every JWT from
    the same signer shares a long identical header prefix. Hashing the
    token first makes the whole token count.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class AuthService:
    """Orchestrates credential checks and token issuance."""

    def __init__(
        self,
        db: AsyncSession,
        tokens: TokenService,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ):
        self.users = DocumentStore(db, User)
        self.tokens = tokens
        self.logger = logger or get_logger("inkwell.auth_service")

    @service_boundary("Error to login")
    async def login(self, email: str, password: str) -> LoginResult:
        user = await self.users.find_one(email=email)
        if user is None:
            self.logger.warning("auth.login_failed", reason="user_not_found", email=email)
            raise NotFound("User not found")

        if not verify_password(password, user.password_hash):
            self.logger.warning("auth.login_failed", reason="invalid_credentials", email=email)
            raise Unauthorized("Invalid credentials")

        claims = {"sub": user.id, "email": user.email}
        access_token = self.tokens.issue_access_token(claims)
        refresh_token = self.tokens.issue_refresh_token(claims)

        user.refresh_token_hash = hash_password(refresh_token_digest(refresh_token))
        await self.users.save(user)

        self.logger.info("auth.login_succeeded", user_id=user.id)
        return LoginResult(
            message="User logged in successfully",
            access_token=access_token,
            refresh_token=refresh_token,
        )

    async def refresh_token(self, token: str) -> str:
        """Exchange a valid refresh token for a new access token."""
        try:
            payload = self.tokens.verify(token, REFRESH)
            user = await self.users.get(str(payload["sub"]))
            if user is None:
                raise LookupError("refresh token subject does not exist")
            if not verify_password(refresh_token_digest(token), user.refresh_token_hash):
                raise LookupError("refresh token does not match the stored hash")
        except Exception as e:
            # One message for every cause: bad signature, expiry, unknown
            # user, superseded token, storage failure.
            self.logger.warning("auth.refresh_rejected", reason=str(e))
            raise Unauthorized(INVALID_REFRESH_TOKEN) from None

        access_token = self.tokens.issue_access_token({"sub": user.id, "email": user.email})
        self.logger.info("auth.token_refreshed", user_id=user.id)
        return access_token
