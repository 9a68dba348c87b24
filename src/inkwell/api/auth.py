"""Auth API — login and token refresh.

Learn: Routes for the token lifecycle:
- POST /auth/login → email/password → access + refresh tokens
- POST /auth/refresh → refresh token → new access token (refresh token kept)

Registration is POST /users (see users.py).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth.jwt import TokenService, get_token_service
from inkwell.db.engine import get_db
from inkwell.schemas.auth import (
    AccessTokenResponse,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
)
from inkwell.services.auth_service import AuthService

router = APIRouter(prefix="/auth")


def _svc(
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(db, tokens)


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, svc: AuthService = Depends(_svc)):
    """Login with email and password → JWT tokens."""
    result = await svc.login(body.email, body.password)
    return LoginResponse(
        message=result.message,
        access_token=result.access_token,
        refresh_token=result.refresh_token,
    )


@router.post("/refresh", response_model=AccessTokenResponse)
async def refresh(body: RefreshRequest, svc: AuthService = Depends(_svc)):
    """Exchange a refresh token for a new access token."""
    access_token = await svc.refresh_token(body.refresh_token)
    return AccessTokenResponse(access_token=access_token)
