import logging
import math
import time
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from catalog_search.core.config import settings
from catalog_search.core.exceptions import InvalidInput
from catalog_search.repositories.product import ProductRepository
from catalog_search.schemas.search import (
    CategoryRef,
    QueryInfo,
    SearchResponse,
    SearchResultItem,
    SearchResults,
)
from catalog_search.services.advice_service import (
    AdviceContext,
    AdviceGenerator,
    AdviceMode,
)
from catalog_search.services.catalog_metadata import CatalogMetadata, get_catalog_metadata
from catalog_search.services.embedding_client import EmbeddingClient

logger = logging.getLogger(__name__)


def _to_float(value) -> Optional[float]:
    # NUMERIC columns come back as Decimal
    return None if value is None else float(value)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def enrich_row(row: Dict[str, Any], metadata: CatalogMetadata) -> SearchResultItem:
    """
    Builds one result item from a similarity-query row, adding the badges
    (popular, scarce, sale) and the category names.
    """
    price = _to_float(row.get("price")) or 0.0
    old_price = _to_float(row.get("old_price"))
    stock = int(row["stock"]) if row.get("stock") is not None else None
    stock_sold = int(row.get("stock_sold") or 0)

    on_sale = old_price is not None and old_price > price
    discount = _round_half_up((1 - price / old_price) * 100) if on_sale else 0

    return SearchResultItem(
        id=row["id"],
        title=row["title"],
        full_title=row.get("full_title"),
        description=row.get("description"),
        url=row.get("url"),
        price=price,
        old_price=old_price,
        on_sale=on_sale,
        discount=discount,
        image=row.get("image"),
        type=row.get("type"),
        artist=row.get("artist") or None,
        dimensions=row.get("dimensions") or None,
        stock=stock,
        stock_sold=stock_sold,
        is_popular=stock_sold >= settings.POPULAR_SALES_THRESHOLD,
        is_scarce=stock is not None and 0 < stock <= settings.SCARCE_STOCK_THRESHOLD,
        categories=[
            CategoryRef(id=cid, name=metadata.category_name(cid))
            for cid in row.get("category_ids") or []
        ],
        similarity=_to_float(row.get("similarity")),
    )


class SearchService:
    def __init__(
        self,
        db: Optional[AsyncSession] = None,
        repo=None,
        embedder: Optional[EmbeddingClient] = None,
        advisor: Optional[AdviceGenerator] = None,
        metadata: Optional[CatalogMetadata] = None,
    ):
        self.repo = repo or ProductRepository(db)
        self.embedder = embedder or EmbeddingClient()
        self.advisor = advisor or AdviceGenerator()
        self.metadata = metadata or get_catalog_metadata()

    async def search(self, query: Any) -> SearchResponse:
        if not isinstance(query, str) or not query.strip():
            raise InvalidInput()

        start = time.perf_counter()

        # 1. Query vector
        query_vector = await self.embedder.embed_query(query)

        # 2. Thresholded similarity search
        rows = await self.repo.search_by_vector(
            query_vector, settings.SIMILARITY_THRESHOLD, settings.MAX_RESULTS
        )
        items = [enrich_row(row, self.metadata) for row in rows]

        # 3. Advice
        total = len(items)
        mode = AdviceMode.RESULTS if total else AdviceMode.EMPTY
        advice = await self.advisor.generate(
            mode,
            AdviceContext(
                query=query, total=total, catalog_summary=self.metadata.summary()
            ),
        )

        took_ms = int((time.perf_counter() - start) * 1000)
        logger.info(f"🔎 '{query}': {total} results in {took_ms}ms")

        return SearchResponse(
            query=QueryInfo(original=query, took_ms=took_ms),
            results=SearchResults(
                total=total, showing=total, items=items, advice=advice
            ),
        )
