"""Pydantic schemas for users, skills and experiences.

Learn: Separate "Create"/"Update" schemas (input) from "Read" schemas
(output). UserRead deliberately has no password or refresh-token field,
so hashes can never leak through a response.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator


# Emails are matched case-sensitively, so they are validated but never normalized.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# ─── Skills & experiences ───────────────────────────────

class Skill(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    level: str = Field(..., min_length=1, max_length=20)


class Experience(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    company: str = Field(..., min_length=1, max_length=100)
    start_date: date
    end_date: Optional[date] = None
    description: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ExperienceUpdate(BaseModel):
    """Replace the experience exactly matching ``old`` with ``new``."""
    old: Experience
    new: Experience


# ─── Users ──────────────────────────────────────────────

class UserCreate(BaseModel):
    fname: str = Field(..., min_length=1, max_length=100)
    lname: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=8, max_length=128)
    phone: str = Field("", max_length=50)
    profile_pic: str = ""
    skills: list[Skill] = Field(default_factory=list)
    experiences: list[Experience] = Field(default_factory=list)


class UserUpdate(BaseModel):
    """Profile fields only. Email, password and roles have their own paths."""
    fname: Optional[str] = Field(None, min_length=1, max_length=100)
    lname: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    profile_pic: Optional[str] = None


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=8, max_length=128)


class UserRead(BaseModel):
    id: str
    email: str
    fname: str
    lname: str
    phone: str
    profile_pic: str
    roles: list[str]
    skills: list[Skill]
    experiences: list[Experience]
    post_ids: list[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class MessageResponse(BaseModel):
    message: str
