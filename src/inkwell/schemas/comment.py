"""Pydantic schemas for comments."""

from datetime import datetime

from pydantic import BaseModel, Field


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)


class CommentUpdate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)


class CommentRead(BaseModel):
    id: str
    content: str
    author_id: str
    post_id: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
