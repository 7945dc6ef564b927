import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from catalog_search.api.deps import get_search_service
from catalog_search.core.exceptions import CatalogSearchError
from catalog_search.schemas.search import ErrorResponse, SearchRequest, SearchResponse
from catalog_search.services.search_service import SearchService

logger = logging.getLogger(__name__)

router = APIRouter()


def error_response(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, details=details).model_dump(),
    )


@router.post(
    "",
    response_model=SearchResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def search_endpoint(
    request: SearchRequest,
    service: SearchService = Depends(get_search_service),
):
    try:
        return await service.search(request.query)
    except CatalogSearchError as e:
        if e.status_code >= 500:
            logger.error(f"[Search Error] {e.message}", exc_info=True)
        return error_response(e.status_code, e.public_message, e.message)
    except Exception as e:
        logger.error(f"[Search Error] {e}", exc_info=True)
        return error_response(500, "Search failed", str(e))
