"""Post API routes.

Reads are open; create/update/delete need a Bearer token. The author is
always the authenticated caller, never a field in the request body.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth.dependencies import CurrentIdentity, get_current_user
from inkwell.db.engine import get_db
from inkwell.schemas.post import PostCreate, PostRead, PostUpdate
from inkwell.services.post_service import PostService

router = APIRouter(prefix="/posts")


def _svc(db: AsyncSession = Depends(get_db)) -> PostService:
    return PostService(db)


@router.post("", response_model=PostRead, status_code=201)
async def create_post(
    body: PostCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: PostService = Depends(_svc),
):
    return await svc.create(identity.user_id, body.title, body.content)


@router.get("", response_model=list[PostRead])
async def list_posts(
    author_id: Optional[str] = Query(None),
    svc: PostService = Depends(_svc),
):
    return await svc.list_posts(author_id=author_id)


@router.get("/{post_id}", response_model=PostRead)
async def get_post(post_id: str, svc: PostService = Depends(_svc)):
    return await svc.get(post_id)


@router.put("/{post_id}", response_model=PostRead)
async def update_post(
    post_id: str,
    body: PostUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: PostService = Depends(_svc),
):
    return await svc.update(post_id, identity.user_id, body.model_dump(exclude_unset=True))


@router.delete("/{post_id}")
async def delete_post(
    post_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: PostService = Depends(_svc),
):
    await svc.delete(post_id, identity.user_id)
    return {"deleted": True}
