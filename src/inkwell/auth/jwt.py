"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
- Access token: short-lived (60min), sent as a Bearer header on API calls
- Refresh token: long-lived (7 days), exchanged for a new access token

Both carry the same claim shape — ``sub`` (user id) and ``email`` — plus a
``type`` claim so one kind can never be used in place of the other, and a
random ``jti`` so two tokens issued in the same second still differ.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt

ACCESS = "access"
REFRESH = "refresh"


class TokenError(Exception):
    """Raised when token verification fails."""


class TokenService:
    """Issues and verifies signed, time-limited tokens."""

    def __init__(
        self,
        secret: str,
        refresh_secret: Optional[str] = None,
        algorithm: str = "HS256",
        access_expire_minutes: int = 60,
        refresh_expire_days: int = 7,
    ):
        self.secret = secret
        self.refresh_secret = refresh_secret or secret
        self.algorithm = algorithm
        self.access_ttl = timedelta(minutes=access_expire_minutes)
        self.refresh_ttl = timedelta(days=refresh_expire_days)

    @classmethod
    def from_settings(cls) -> "TokenService":
        from inkwell.config import settings

        return cls(
            secret=settings.jwt_secret,
            refresh_secret=settings.refresh_secret,
            algorithm=settings.jwt_algorithm,
            access_expire_minutes=settings.access_token_expire_minutes,
            refresh_expire_days=settings.refresh_token_expire_days,
        )

    # ─── Issue ──────────────────────────────────────────

    def issue_access_token(
        self, claims: dict[str, Any], expires_in: Optional[timedelta] = None
    ) -> str:
        return self._encode(claims, ACCESS, expires_in or self.access_ttl)

    def issue_refresh_token(
        self, claims: dict[str, Any], expires_in: Optional[timedelta] = None
    ) -> str:
        return self._encode(claims, REFRESH, expires_in or self.refresh_ttl)

    def _encode(self, claims: dict[str, Any], token_type: str, ttl: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(claims["sub"]),
            "email": claims.get("email"),
            "type": token_type,
            "iat": now,
            "exp": now + ttl,
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self._secret_for(token_type), algorithm=self.algorithm)

    # ─── Verify / decode ────────────────────────────────

    def verify(self, token: str, token_type: str = ACCESS) -> dict[str, Any]:
        """Check signature, expiry and token type; return the claims.

        Raises TokenError for malformed, expired, tampered, or wrong-type
        tokens.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_for(token_type),
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise TokenError(f"Invalid token: {e}")

        if payload.get("type") != token_type:
            raise TokenError(f"Expected a {token_type} token")
        return payload

    def decode(self, token: str) -> dict[str, Any]:
        """Read claims WITHOUT checking the signature.

        Only for tokens whose origin is already trusted (e.g. one this
        client stored itself after login). Never call this on a token
        taken from an inbound request without verify() first.
        """
        return decode_unverified(token)

    def _secret_for(self, token_type: str) -> str:
        return self.refresh_secret if token_type == REFRESH else self.secret


def get_token_service() -> TokenService:
    """FastAPI dependency — token service built from settings."""
    return TokenService.from_settings()


def decode_unverified(token: str) -> dict[str, Any]:
    """Claims of a trusted token, signature NOT checked. See TokenService.decode."""
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}")
