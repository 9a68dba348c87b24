"""User service — accounts, profiles, skills and experiences.

Learn: Service layer separates business logic from HTTP routing.
API routes call services, services call the DocumentStore.

Passwords are hashed here, explicitly, at the two places a plaintext
password enters the system: create() and change_password().

Skills and experiences are embedded lists on the user record:
- skill names are unique per user (exact, case-sensitive)
- two experiences with the same title+company are duplicates when added
- a replacement experience may not overlap any stored experience with the
  same title+company (see update_experience)

Every method that mutates an account takes an optional ``caller_id``; when
given, the caller must be the account holder. Existence is checked first,
so a missing account is NotFound for everyone.
"""

from datetime import date
from typing import Any, Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth.ownership import ensure_owner
from inkwell.auth.password import hash_password, verify_password
from inkwell.db.models import User
from inkwell.db.store import DocumentStore
from inkwell.errors import Conflict, NotFound, service_boundary
from inkwell.log import get_logger
from inkwell.schemas.user import Experience, Skill, UserCreate

UPDATABLE_PROFILE_FIELDS = ("fname", "lname", "phone", "profile_pic")


def experience_span(exp: Experience) -> tuple[date, date]:
    """(start, end) with an open-ended experience running to date.max."""
    return exp.start_date, exp.end_date or date.max


def overlaps(a: Experience, b: Experience) -> bool:
    a_start, a_end = experience_span(a)
    b_start, b_end = experience_span(b)
    return a_start < b_end and a_end > b_start


def _same_role(a: Experience, b: Experience) -> bool:
    return a.title == b.title and a.company == b.company


def _exact_match(a: Experience, b: Experience) -> bool:
    return _same_role(a, b) and a.start_date == b.start_date and a.end_date == b.end_date


class UserService:
    """Business logic for user accounts."""

    def __init__(
        self,
        db: AsyncSession,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ):
        self.users = DocumentStore(db, User)
        self.logger = logger or get_logger("inkwell.user_service")

    # ─── Accounts ───────────────────────────────────────

    @service_boundary("Failed to create user")
    async def create(self, data: UserCreate) -> User:
        if await self.users.find_one(email=data.email):
            self.logger.warning("user.email_taken", email=data.email)
            raise Conflict("Email already in use")

        self._check_initial_entries(data)

        try:
            user = await self.users.create(
                email=data.email,
                password_hash=hash_password(data.password),
                fname=data.fname,
                lname=data.lname,
                phone=data.phone,
                profile_pic=data.profile_pic,
                skills=[s.model_dump() for s in data.skills],
                experiences=[e.model_dump(mode="json") for e in data.experiences],
            )
        except IntegrityError:
            # Lost a registration race on the unique email index.
            self.logger.warning("user.email_taken", email=data.email)
            raise Conflict("Email already in use")

        self.logger.info("user.created", user_id=user.id)
        return user

    @service_boundary("Error retrieving users")
    async def list_users(self) -> list[User]:
        users = await self.users.find()
        self.logger.info("user.listed", count=len(users))
        return users

    @service_boundary("Error finding user")
    async def get(self, user_id: str) -> User:
        return await self._require(user_id)

    @service_boundary("Error updating user")
    async def update(
        self, user_id: str, fields: dict[str, Any], caller_id: Optional[str] = None
    ) -> User:
        user = await self._require(user_id, caller_id)
        for key, value in fields.items():
            if key in UPDATABLE_PROFILE_FIELDS and value is not None:
                setattr(user, key, value)
        await self.users.save(user)
        self.logger.info("user.updated", user_id=user_id, fields=sorted(fields))
        return user

    @service_boundary("Error deleting user")
    async def delete(self, user_id: str, caller_id: Optional[str] = None) -> dict[str, str]:
        """Delete the account. Posts and comments by the user are kept."""
        await self._require(user_id, caller_id)
        await self.users.delete(user_id)
        self.logger.info("user.deleted", user_id=user_id)
        return {"message": "User deleted successfully"}

    @service_boundary("Error updating password")
    async def change_password(
        self,
        user_id: str,
        current_password: str,
        new_password: str,
        caller_id: Optional[str] = None,
    ) -> User:
        user = await self._require(user_id, caller_id)

        if not verify_password(current_password, user.password_hash):
            self.logger.warning("user.password_change_rejected", user_id=user_id, reason="wrong_current")
            raise Conflict("Current password is incorrect")
        if current_password == new_password:
            self.logger.warning("user.password_change_rejected", user_id=user_id, reason="unchanged")
            raise Conflict("New password cannot be the same as the current password")

        user.password_hash = hash_password(new_password)
        await self.users.save(user)
        self.logger.info("user.password_changed", user_id=user_id)
        return user

    # ─── Skills ─────────────────────────────────────────

    @service_boundary("Error adding skill")
    async def add_skill(self, user_id: str, skill: Skill, caller_id: Optional[str] = None) -> User:
        user = await self._require(user_id, caller_id)
        if any(s["name"] == skill.name for s in user.skills):
            self.logger.warning("user.skill_exists", user_id=user_id, skill=skill.name)
            raise Conflict("Skill already exists for this user")

        user.skills = [*user.skills, skill.model_dump()]
        await self.users.save(user, "skills")
        self.logger.info("user.skill_added", user_id=user_id, skill=skill.name)
        return user

    @service_boundary("Error updating skill")
    async def update_skill(
        self,
        user_id: str,
        skill_name: str,
        skill: Skill,
        caller_id: Optional[str] = None,
    ) -> User:
        """Replace the skill called ``skill_name`` (rename allowed)."""
        user = await self._require(user_id, caller_id)
        names = [s["name"] for s in user.skills]
        if skill_name not in names:
            self.logger.warning("user.skill_not_found", user_id=user_id, skill=skill_name)
            raise NotFound("Skill not found")
        if skill.name != skill_name and skill.name in names:
            self.logger.warning("user.skill_exists", user_id=user_id, skill=skill.name)
            raise Conflict("Skill with this name already exists")

        user.skills = [
            skill.model_dump() if s["name"] == skill_name else s for s in user.skills
        ]
        await self.users.save(user, "skills")
        self.logger.info("user.skill_updated", user_id=user_id, skill=skill.name)
        return user

    # ─── Experiences ────────────────────────────────────

    @service_boundary("Error adding experience")
    async def add_experience(
        self, user_id: str, experience: Experience, caller_id: Optional[str] = None
    ) -> User:
        user = await self._require(user_id, caller_id)
        if any(_same_role(e, experience) for e in self._experiences(user)):
            self.logger.warning("user.duplicate_experience", user_id=user_id)
            raise Conflict("Duplicate experience detected")

        user.experiences = [*user.experiences, experience.model_dump(mode="json")]
        await self.users.save(user, "experiences")
        self.logger.info("user.experience_added", user_id=user_id)
        return user

    @service_boundary("Error updating experience")
    async def update_experience(
        self,
        user_id: str,
        old: Experience,
        new: Experience,
        caller_id: Optional[str] = None,
    ) -> User:
        """Replace the experience exactly matching ``old`` with ``new``.

        ``new`` is checked for date overlap against every stored experience
        with its title+company. The entry being replaced counts too, unless
        ``new`` keeps its exact date range: a role's dates cannot be moved
        to a span that partially overlaps where it used to be.
        """
        user = await self._require(user_id, caller_id)
        experiences = self._experiences(user)

        index = next((i for i, e in enumerate(experiences) if _exact_match(e, old)), None)
        if index is None:
            self.logger.warning("user.experience_not_found", user_id=user_id)
            raise NotFound("Experience not found")

        for i, existing in enumerate(experiences):
            if not _same_role(existing, new):
                continue
            if i == index and experience_span(existing) == experience_span(new):
                continue
            if overlaps(new, existing):
                self.logger.warning("user.experience_overlap", user_id=user_id)
                raise Conflict("Experience overlaps with an existing experience")

        updated = list(user.experiences)
        updated[index] = new.model_dump(mode="json")
        user.experiences = updated
        await self.users.save(user, "experiences")
        self.logger.info("user.experience_updated", user_id=user_id)
        return user

    # ─── Helpers ────────────────────────────────────────

    async def _require(self, user_id: str, caller_id: Optional[str] = None) -> User:
        user = await self.users.get(user_id)
        if user is None:
            self.logger.warning("user.not_found", user_id=user_id)
            raise NotFound("User not found")
        if caller_id is not None:
            ensure_owner(user.id, caller_id, "You are not allowed to modify this user")
        return user

    def _check_initial_entries(self, data: UserCreate) -> None:
        """Apply the add_skill and add_experience rules to a registration payload."""
        names: set[str] = set()
        for skill in data.skills:
            if skill.name in names:
                self.logger.warning("user.skill_exists", email=data.email, skill=skill.name)
                raise Conflict("Skill already exists for this user")
            names.add(skill.name)

        accepted: list[Experience] = []
        for experience in data.experiences:
            if any(_same_role(e, experience) for e in accepted):
                self.logger.warning("user.duplicate_experience", email=data.email)
                raise Conflict("Duplicate experience detected")
            accepted.append(experience)

    @staticmethod
    def _experiences(user: User) -> list[Experience]:
        return [Experience.model_validate(e) for e in user.experiences]
