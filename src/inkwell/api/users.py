"""User API routes — registration, profile, skills, experiences.

Learn: Registration and reads are open. Everything that changes an
account requires a Bearer token, and the service checks that the caller
is the account holder (after confirming the account exists).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth.dependencies import CurrentIdentity, get_current_user
from inkwell.db.engine import get_db
from inkwell.schemas.user import (
    Experience,
    ExperienceUpdate,
    MessageResponse,
    PasswordChange,
    Skill,
    UserCreate,
    UserRead,
    UserUpdate,
)
from inkwell.services.user_service import UserService

router = APIRouter(prefix="/users")


def _svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


# ─── Accounts ───────────────────────────────────────────

@router.post("", response_model=UserRead, status_code=201)
async def register(body: UserCreate, svc: UserService = Depends(_svc)):
    """Create a new user account."""
    return await svc.create(body)


@router.get("", response_model=list[UserRead])
async def list_users(svc: UserService = Depends(_svc)):
    return await svc.list_users()


@router.get("/profile", response_model=UserRead)
async def get_profile(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_svc),
):
    """The authenticated caller's own account."""
    return await svc.get(identity.user_id)


@router.get("/{user_id}", response_model=UserRead)
async def get_user(user_id: str, svc: UserService = Depends(_svc)):
    return await svc.get(user_id)


@router.put("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: str,
    body: UserUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_svc),
):
    return await svc.update(
        user_id, body.model_dump(exclude_unset=True), caller_id=identity.user_id
    )


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_svc),
):
    return await svc.delete(user_id, caller_id=identity.user_id)


@router.put("/{user_id}/change-password", response_model=MessageResponse)
async def change_password(
    user_id: str,
    body: PasswordChange,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_svc),
):
    await svc.change_password(
        user_id,
        body.current_password,
        body.new_password,
        caller_id=identity.user_id,
    )
    return MessageResponse(message="Password updated successfully")


# ─── Skills ─────────────────────────────────────────────

@router.post("/{user_id}/skills", response_model=UserRead, status_code=201)
async def add_skill(
    user_id: str,
    body: Skill,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_svc),
):
    return await svc.add_skill(user_id, body, caller_id=identity.user_id)


@router.put("/{user_id}/skills/{skill_name}", response_model=UserRead)
async def update_skill(
    user_id: str,
    skill_name: str,
    body: Skill,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_svc),
):
    return await svc.update_skill(user_id, skill_name, body, caller_id=identity.user_id)


# ─── Experiences ────────────────────────────────────────

@router.post("/{user_id}/experiences", response_model=UserRead, status_code=201)
async def add_experience(
    user_id: str,
    body: Experience,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_svc),
):
    return await svc.add_experience(user_id, body, caller_id=identity.user_id)


@router.put("/{user_id}/experiences", response_model=UserRead)
async def update_experience(
    user_id: str,
    body: ExperienceUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_svc),
):
    return await svc.update_experience(
        user_id, body.old, body.new, caller_id=identity.user_id
    )
