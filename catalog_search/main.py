import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from catalog_search.api.v1 import search, ingestion
from catalog_search.core.config import settings
from catalog_search.core.exceptions import InvalidInput
from catalog_search.core.database import engine, init_db
from catalog_search.core.logging import setup_logging
from catalog_search.services.catalog_metadata import get_catalog_metadata
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup ---
    setup_logging()
    logger.info(f"🚀 Starting {settings.PROJECT_NAME}...")

    await init_db()
    # Static taxonomy is loaded once and shared by every request
    get_catalog_metadata()

    yield

    # --- Shutdown ---
    logger.info("🛑 Shutting down...")
    await engine.dispose()


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

# The search widget is embedded on the shop's own domain
origins = [
    "*"
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=False,
    allow_methods=["POST", "OPTIONS", "GET"],
    allow_headers=["Content-Type"],
)

# Routes
app.include_router(search.router, prefix=f"{settings.API_V1_STR}/search", tags=["search"])
app.include_router(ingestion.router, prefix=f"{settings.API_V1_STR}/ingestion", tags=["ingestion"])


@app.get("/api/health")
def health_check():
    return {"status": "ok", "service": settings.PROJECT_NAME}


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Search clients always get the search error payload, even for bodies
    # that are not a JSON object
    if request.url.path.startswith(f"{settings.API_V1_STR}/search"):
        return search.error_response(
            400,
            InvalidInput.public_message,
            "Request body must be a JSON object with a 'query' string",
        )
    return await request_validation_exception_handler(request, exc)
