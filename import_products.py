"""
Imports the catalog export into the vector store.

    python import_products.py [data_dir] [--reconcile]
"""
import asyncio
import logging
import sys
from pathlib import Path

from catalog_search.core.config import settings
from catalog_search.core.database import SessionLocal, engine, init_db
from catalog_search.core.exceptions import IngestionBatchFailure
from catalog_search.core.logging import setup_logging
from catalog_search.services.catalog_loader import CatalogSnapshot
from catalog_search.services.ingestion_service import IngestionPipeline

logger = logging.getLogger("import_products")


async def main(data_dir: Path, reconcile: bool) -> int:
    await init_db()
    snapshot = CatalogSnapshot.load(data_dir)
    try:
        async with SessionLocal() as db:
            report = await IngestionPipeline(db).run(snapshot, reconcile=reconcile)
    except IngestionBatchFailure as e:
        logger.error(f"❌ Import failed at batch {e.batch_number}: {e.message}")
        return 1
    finally:
        await engine.dispose()

    stats = report.store
    print("\n📊 Database stats:")
    print(f"   Total products: {stats['total']}")
    print(f"   With embeddings: {stats['with_embeddings']}")
    print(f"   With price > 0: {stats['with_price']}")
    print(f"   Average price: €{stats['avg_price']:.2f}")
    print(f"   Max price: €{stats['max_price']:.2f}")
    return 0


if __name__ == "__main__":
    setup_logging()
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    directory = Path(args[0]) if args else Path(settings.CATALOG_DATA_DIR)
    sys.exit(asyncio.run(main(directory, "--reconcile" in sys.argv)))
