import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from catalog_search.core.config import settings
from catalog_search.core.exceptions import IngestionBatchFailure, RateLimited
from catalog_search.repositories.product import ProductRepository
from catalog_search.repositories.taxonomy import TaxonomyRepository
from catalog_search.schemas.catalog import RawProduct
from catalog_search.services.catalog_loader import CatalogSnapshot
from catalog_search.services.embedding_client import EmbeddingClient
from catalog_search.services.normalizer import CatalogNormalizer, NormalizedProduct

logger = logging.getLogger(__name__)


@dataclass
class IngestionReport:
    visible: int = 0
    hidden_skipped: int = 0
    batches: int = 0
    inserted: int = 0
    updated: int = 0
    tags: int = 0
    categories: int = 0
    hidden_by_reconcile: int = 0
    duration_s: float = 0.0
    store: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class IngestionPipeline:
    """
    Normalizer -> embeddings -> vector store over a full catalog snapshot.

    Every write is an idempotent upsert, so a failed run is recovered by
    running it again from the start.
    """

    def __init__(
        self,
        db: AsyncSession,
        embedder: Optional[EmbeddingClient] = None,
        products: Optional[ProductRepository] = None,
        taxonomy: Optional[TaxonomyRepository] = None,
        batch_size: Optional[int] = None,
    ):
        self.db = db
        self.embedder = embedder or EmbeddingClient()
        self.products = products or ProductRepository(db)
        self.taxonomy = taxonomy or TaxonomyRepository(db)
        self.batch_size = batch_size or settings.INGESTION_BATCH_SIZE

    @retry(
        retry=retry_if_exception_type(RateLimited),
        wait=wait_exponential(multiplier=1, min=2, max=60),
        stop=stop_after_attempt(5),
        reraise=True,
    )
    async def _embed_batch_safe(self, texts: List[str]) -> List[List[float]]:
        """Embeds one batch, backing off while the provider rate-limits us."""
        return await self.embedder.embed(texts)

    async def run(self, snapshot: CatalogSnapshot, reconcile: bool = False) -> IngestionReport:
        started = time.perf_counter()
        report = IngestionReport()

        # All tags (visible or not) and categories first: join rows reference them
        try:
            report.categories = await self.taxonomy.upsert_categories(snapshot.categories)
            report.tags = await self.taxonomy.upsert_tags(snapshot.tags)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"❌ Taxonomy import failed: {e}", exc_info=True)
            raise IngestionBatchFailure(0, f"Taxonomy import failed: {e}") from e
        logger.info(f"📋 Imported {report.tags} tags and {report.categories} categories")

        visible = snapshot.visible_products
        report.visible = len(visible)
        report.hidden_skipped = len(snapshot.products) - len(visible)
        logger.info(
            f"✅ Importing {report.visible} visible products "
            f"({report.hidden_skipped} hidden products skipped)"
        )

        normalizer = CatalogNormalizer(snapshot)
        batches = [
            visible[i:i + self.batch_size] for i in range(0, len(visible), self.batch_size)
        ]
        for number, batch in enumerate(batches, start=1):
            inserted, updated = await self.process_batch(
                batch, snapshot, normalizer, number, len(batches)
            )
            report.inserted += inserted
            report.updated += updated
            report.batches += 1

        # Reported as the batch after the last product batch
        final_step = len(batches) + 1
        if reconcile:
            try:
                report.hidden_by_reconcile = await self.products.hide_missing(
                    [p.id for p in visible]
                )
                await self.db.commit()
            except Exception as e:
                await self.db.rollback()
                logger.error(f"❌ Reconcile failed: {e}", exc_info=True)
                raise IngestionBatchFailure(final_step, f"Reconcile failed: {e}") from e
            logger.info(f"🙈 Marked {report.hidden_by_reconcile} stale products invisible")

        try:
            report.store = await self.products.stats()
        except Exception as e:
            logger.error(f"❌ Store stats failed: {e}", exc_info=True)
            raise IngestionBatchFailure(final_step, f"Store stats failed: {e}") from e
        report.duration_s = round(time.perf_counter() - started, 1)
        logger.info(f"✅ Import complete in {report.duration_s}s: {report.store}")
        return report

    async def process_batch(
        self,
        batch: List[RawProduct],
        snapshot: CatalogSnapshot,
        normalizer: CatalogNormalizer,
        number: int,
        total: int,
    ):
        logger.info(f"🔄 Batch {number}/{total} ({len(batch)} products)")
        inserted = updated = 0
        try:
            normalized = [normalizer.normalize(p) for p in batch]
            vectors = await self._embed_batch_safe([n.embedding_text for n in normalized])

            for item, vector in zip(normalized, vectors):
                if await self.products.upsert_product(self.row_values(item, vector, snapshot)):
                    inserted += 1
                else:
                    updated += 1
                await self.products.add_categories(item.product.id, item.category_ids)
                await self.products.add_tags(item.product.id, item.tag_ids)

            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"❌ Batch {number} failed: {e}", exc_info=True)
            raise IngestionBatchFailure(number, f"Batch {number} failed: {e}") from e

        logger.info(f"  ✅ Batch complete! ({inserted} new, {updated} updated)")
        return inserted, updated

    @staticmethod
    def row_values(
        item: NormalizedProduct, vector: List[float], snapshot: CatalogSnapshot
    ) -> Dict[str, Any]:
        product = item.product
        variant = snapshot.variant_for(product.id)
        return {
            "id": product.id,
            "title": product.title,
            "full_title": product.full_title or product.title,
            "description": product.description or "",
            "content": product.content or "",
            "url": product.url,
            "is_visible": product.is_visible,
            "price": variant.price,
            "old_price": variant.old_price,
            "stock": variant.stock,
            "stock_sold": variant.stock_sold,
            "artist": item.artist,
            "dimensions": item.dimensions,
            "type": item.type.value,
            "image": product.image,
            "embedding": vector,
        }
