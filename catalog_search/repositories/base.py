from typing import Generic, TypeVar, Type, List, Any, Dict, Iterable
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from catalog_search.core.database import Base
from catalog_search.core.exceptions import StoreFailure

ModelType = TypeVar("ModelType", bound=Base)

UPSERT_CHUNK_SIZE = 1000


class BaseRepository(Generic[ModelType]):
    def __init__(self, db: AsyncSession, model: Type[ModelType]):
        self.db = db
        self.model = model

    async def _execute(self, stmt):
        try:
            return await self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise StoreFailure(f"{self.model.__tablename__}: {e}") from e

    async def upsert_many(
        self,
        rows: List[Dict[str, Any]],
        index_elements: Iterable[str] = ("id",),
    ) -> int:
        """
        INSERT ... ON CONFLICT DO UPDATE for every non-key column of the rows.
        """
        keys = list(index_elements)
        # Keeps each statement under the driver's bind-parameter limit
        for start in range(0, len(rows), UPSERT_CHUNK_SIZE):
            chunk = rows[start:start + UPSERT_CHUNK_SIZE]
            stmt = insert(self.model).values(chunk)
            update_set = {
                name: stmt.excluded[name] for name in chunk[0] if name not in keys
            }
            if "updated_at" in self.model.__table__.columns:
                update_set["updated_at"] = func.now()
            await self._execute(
                stmt.on_conflict_do_update(index_elements=keys, set_=update_set)
            )
        return len(rows)

    async def insert_missing(self, model: Type[Base], rows: List[Dict[str, Any]]) -> None:
        """
        INSERT ... ON CONFLICT DO NOTHING, used for the join tables.
        """
        if not rows:
            return
        await self._execute(insert(model).values(rows).on_conflict_do_nothing())
