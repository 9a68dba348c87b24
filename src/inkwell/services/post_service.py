"""Post service — publishing, editing and deleting posts.

Learn: Mutations follow a fixed check order: load the post (NotFound if
missing), then compare its author with the caller (Forbidden if they
differ), then write. The author is set once from the authenticated
caller and never changes.

Creating a post is two writes — the post itself, then its id appended to
the author's post_ids. There is no rollback if the second write fails.
Deleting a post leaves its comments in place.
"""

from typing import Any, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth.ownership import ensure_owner
from inkwell.db.models import Post, User
from inkwell.db.store import DocumentStore
from inkwell.errors import Forbidden, NotFound, service_boundary
from inkwell.log import get_logger

EDITABLE_FIELDS = ("title", "content")


class PostService:
    """Business logic for posts."""

    def __init__(
        self,
        db: AsyncSession,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ):
        self.posts = DocumentStore(db, Post)
        self.users = DocumentStore(db, User)
        self.logger = logger or get_logger("inkwell.post_service")

    @service_boundary("Error creating post")
    async def create(self, author_id: str, title: str, content: str) -> Post:
        author = await self.users.get(author_id)
        if author is None:
            self.logger.warning("post.author_missing", user_id=author_id)
            raise Forbidden("User not found")

        post = await self.posts.create(title=title, content=content, author_id=author.id)

        author.post_ids = [*author.post_ids, post.id]
        await self.users.save(author, "post_ids")

        self.logger.info("post.created", post_id=post.id, user_id=author_id)
        return post

    @service_boundary("Error retrieving posts")
    async def list_posts(self, author_id: Optional[str] = None) -> list[Post]:
        if author_id:
            return await self.posts.find(author_id=author_id)
        return await self.posts.find()

    @service_boundary("Error retrieving post")
    async def get(self, post_id: str) -> Post:
        return await self._require(post_id)

    @service_boundary("Error updating post")
    async def update(self, post_id: str, caller_id: str, fields: dict[str, Any]) -> Post:
        post = await self._require(post_id)
        ensure_owner(post.author_id, caller_id, "You are not allowed to update this post")

        for key, value in fields.items():
            if key in EDITABLE_FIELDS and value is not None:
                setattr(post, key, value)
        await self.posts.save(post)
        self.logger.info("post.updated", post_id=post_id, user_id=caller_id)
        return post

    @service_boundary("Error deleting post")
    async def delete(self, post_id: str, caller_id: str) -> None:
        post = await self._require(post_id)
        ensure_owner(post.author_id, caller_id, "You are not allowed to delete this post")

        author_id = post.author_id
        await self.posts.delete(post_id)

        author = await self.users.get(author_id)
        if author is not None and post_id in author.post_ids:
            author.post_ids = [pid for pid in author.post_ids if pid != post_id]
            await self.users.save(author, "post_ids")

        self.logger.info("post.deleted", post_id=post_id, user_id=caller_id)

    async def _require(self, post_id: str) -> Post:
        post = await self.posts.get(post_id)
        if post is None:
            self.logger.warning("post.not_found", post_id=post_id)
            raise NotFound("Post not found")
        return post
