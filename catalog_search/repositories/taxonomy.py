from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from catalog_search.models.product import Category, Tag
from catalog_search.repositories.base import BaseRepository
from catalog_search.schemas.catalog import RawCategory, RawTag


class TaxonomyRepository:
    """Upserts the category and tag rows the product join tables point at."""

    def __init__(self, db: AsyncSession):
        self.categories = BaseRepository(db, Category)
        self.tags = BaseRepository(db, Tag)

    async def upsert_categories(self, categories: Iterable[RawCategory]) -> int:
        return await self.categories.upsert_many(
            [{"id": c.id, "title": c.title, "url": c.url} for c in categories]
        )

    async def upsert_tags(self, tags: Iterable[RawTag]) -> int:
        return await self.tags.upsert_many(
            [
                {"id": t.id, "title": t.title, "url": t.url, "is_visible": t.is_visible}
                for t in tags
            ]
        )
