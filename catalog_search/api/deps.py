from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_search.core.database import SessionLocal
from catalog_search.services.search_service import SearchService


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Opens one database session per request and closes it when the request
    ends.
    """
    async with SessionLocal() as db:
        yield db


def get_search_service(db: AsyncSession = Depends(get_db)) -> SearchService:
    return SearchService(db)
