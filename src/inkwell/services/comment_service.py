"""Comment service — comments attached to posts.

Same check order as posts: existence (NotFound), then authorship
(Forbidden), then the write. The comment's post and author are fixed at
creation.
"""

from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth.ownership import ensure_owner
from inkwell.db.models import Comment, Post, User
from inkwell.db.store import DocumentStore
from inkwell.errors import Forbidden, NotFound, service_boundary
from inkwell.log import get_logger


class CommentService:
    """Business logic for comments."""

    def __init__(
        self,
        db: AsyncSession,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ):
        self.comments = DocumentStore(db, Comment)
        self.posts = DocumentStore(db, Post)
        self.users = DocumentStore(db, User)
        self.logger = logger or get_logger("inkwell.comment_service")

    @service_boundary("Error creating comment")
    async def create(self, post_id: str, author_id: str, content: str) -> Comment:
        post = await self.posts.get(post_id)
        if post is None:
            self.logger.warning("comment.post_missing", post_id=post_id)
            raise NotFound("Post not found")

        if await self.users.get(author_id) is None:
            self.logger.warning("comment.author_missing", user_id=author_id)
            raise Forbidden("User not found")

        comment = await self.comments.create(
            content=content, post_id=post.id, author_id=author_id
        )

        post.comment_ids = [*post.comment_ids, comment.id]
        await self.posts.save(post, "comment_ids")

        self.logger.info("comment.created", comment_id=comment.id, post_id=post_id, user_id=author_id)
        return comment

    @service_boundary("Error retrieving comments")
    async def list_for_post(self, post_id: Optional[str] = None) -> list[Comment]:
        if post_id:
            return await self.comments.find(post_id=post_id)
        return await self.comments.find()

    @service_boundary("Error retrieving comment")
    async def get(self, comment_id: str) -> Comment:
        return await self._require(comment_id)

    @service_boundary("Error updating comment")
    async def update(self, comment_id: str, caller_id: str, content: str) -> Comment:
        comment = await self._require(comment_id)
        ensure_owner(comment.author_id, caller_id, "You are not allowed to update this comment")

        comment.content = content
        await self.comments.save(comment)
        self.logger.info("comment.updated", comment_id=comment_id, user_id=caller_id)
        return comment

    @service_boundary("Error deleting comment")
    async def delete(self, comment_id: str, caller_id: str) -> None:
        comment = await self._require(comment_id)
        ensure_owner(comment.author_id, caller_id, "You are not allowed to delete this comment")

        post_id = comment.post_id
        await self.comments.delete(comment_id)

        post = await self.posts.get(post_id)
        if post is not None and comment_id in post.comment_ids:
            post.comment_ids = [cid for cid in post.comment_ids if cid != comment_id]
            await self.posts.save(post, "comment_ids")

        self.logger.info("comment.deleted", comment_id=comment_id, user_id=caller_id)

    async def _require(self, comment_id: str) -> Comment:
        comment = await self.comments.get(comment_id)
        if comment is None:
            self.logger.warning("comment.not_found", comment_id=comment_id)
            raise NotFound("Comment not found")
        return comment
