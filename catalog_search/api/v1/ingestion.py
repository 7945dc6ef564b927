import asyncio
import logging
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_search.api.deps import get_db
from catalog_search.core.config import settings
from catalog_search.core.exceptions import IngestionBatchFailure
from catalog_search.services.catalog_loader import CatalogSnapshot
from catalog_search.services.ingestion_service import IngestionPipeline

logger = logging.getLogger(__name__)

router = APIRouter()

# One ingestion run per process at a time
_ingestion_lock = asyncio.Lock()


@router.post("/sync-products")
async def sync_products(reconcile: bool = False, db: AsyncSession = Depends(get_db)):
    """
    Reads the catalog export from CATALOG_DATA_DIR and upserts every visible
    product with a fresh embedding.
    """
    if _ingestion_lock.locked():
        raise HTTPException(status_code=409, detail="Ingestion already running")

    async with _ingestion_lock:
        try:
            snapshot = CatalogSnapshot.load(Path(settings.CATALOG_DATA_DIR))
        except (OSError, ValueError) as e:
            logger.error(f"❌ Catalog export unreadable: {e}")
            raise HTTPException(status_code=400, detail=f"Catalog export unreadable: {e}")

        try:
            report = await IngestionPipeline(db).run(snapshot, reconcile=reconcile)
        except IngestionBatchFailure as e:
            raise HTTPException(
                status_code=500,
                detail={"error": e.message, "batch": e.batch_number},
            )

    return {"status": "success", **report.to_dict()}
