"""Document-style storage collaborator.

Learn: Services talk to storage through DocumentStore instead of building
queries inline. It exposes the handful of operations a document database
would: get by id, find by field equality, create, save, delete.

Every write commits immediately. That is the whole consistency model:
a single record update is atomic, but there is no transaction spanning two
records (e.g. a new post and its author's post_ids list). If the second
write fails the first one stays.
"""

from typing import Any, Generic, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified

from inkwell.db.models import Base

ModelT = TypeVar("ModelT", bound=Base)


class DocumentStore(Generic[ModelT]):
    """Per-model CRUD over an AsyncSession."""

    def __init__(self, db: AsyncSession, model: type[ModelT]):
        self.db = db
        self.model = model

    # ─── Reads ──────────────────────────────────────────

    async def get(self, id: str) -> Optional[ModelT]:
        return await self.db.get(self.model, id)

    async def find_one(self, **filters: Any) -> Optional[ModelT]:
        result = await self.db.execute(
            select(self.model).filter_by(**filters).limit(1)
        )
        return result.scalars().first()

    async def find(self, **filters: Any) -> list[ModelT]:
        """All records matching the equality filters, oldest first."""
        q = select(self.model).filter_by(**filters)
        if hasattr(self.model, "created_at"):
            q = q.order_by(self.model.created_at)
        result = await self.db.execute(q)
        return list(result.scalars().all())

    # ─── Writes ─────────────────────────────────────────

    async def create(self, **fields: Any) -> ModelT:
        obj = self.model(**fields)
        self.db.add(obj)
        await self._commit()
        return obj

    async def save(self, obj: ModelT, *json_fields: str) -> ModelT:
        """Persist attribute changes on ``obj``.

        JSON columns are not change-tracked in place, so callers name the
        ones they touched.
        """
        for field in json_fields:
            flag_modified(obj, field)
        self.db.add(obj)
        await self._commit()
        return obj

    async def delete(self, id: str) -> bool:
        obj = await self.get(id)
        if obj is None:
            return False
        await self.db.delete(obj)
        await self._commit()
        return True

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
