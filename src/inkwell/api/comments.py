"""Comment API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth.dependencies import CurrentIdentity, get_current_user
from inkwell.db.engine import get_db
from inkwell.schemas.comment import CommentCreate, CommentRead, CommentUpdate
from inkwell.services.comment_service import CommentService

router = APIRouter(prefix="/comments")


def _svc(db: AsyncSession = Depends(get_db)) -> CommentService:
    return CommentService(db)


@router.post("/{post_id}", response_model=CommentRead, status_code=201)
async def create_comment(
    post_id: str,
    body: CommentCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: CommentService = Depends(_svc),
):
    return await svc.create(post_id, identity.user_id, body.content)


@router.get("", response_model=list[CommentRead])
async def list_comments(
    post_id: Optional[str] = Query(None, alias="postId"),
    svc: CommentService = Depends(_svc),
):
    return await svc.list_for_post(post_id)


@router.get("/{comment_id}", response_model=CommentRead)
async def get_comment(comment_id: str, svc: CommentService = Depends(_svc)):
    return await svc.get(comment_id)


@router.patch("/{comment_id}", response_model=CommentRead)
async def update_comment(
    comment_id: str,
    body: CommentUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: CommentService = Depends(_svc),
):
    return await svc.update(comment_id, identity.user_id, body.content)


@router.delete("/{comment_id}")
async def delete_comment(
    comment_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: CommentService = Depends(_svc),
):
    await svc.delete(comment_id, identity.user_id)
    return {"deleted": True}
