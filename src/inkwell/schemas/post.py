"""Pydantic schemas for posts."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class PostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    content: str = Field(..., min_length=1)


class PostUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    content: Optional[str] = Field(None, min_length=1)


class PostRead(BaseModel):
    id: str
    title: str
    content: str
    author_id: str
    comment_ids: list[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
