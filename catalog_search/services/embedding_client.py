import asyncio
import logging
from http import HTTPStatus
from typing import List, Optional, Sequence

from google.api_core.exceptions import ResourceExhausted, TooManyRequests

from catalog_search.core.config import settings
from catalog_search.core.exceptions import RateLimited, ServiceUnavailable
from catalog_search.services.llm_factory import get_embeddings

logger = logging.getLogger(__name__)

RATE_LIMIT_STATUS = "RESOURCE_EXHAUSTED"


def is_rate_limit(error: BaseException) -> bool:
    """
    True for quota errors, including ones a provider wrapper re-raised as a
    generic exception: the exception type, an HTTP status attribute of 429
    or the gRPC status name anywhere in the ``__cause__`` chain.
    """
    while error is not None:
        if isinstance(error, (ResourceExhausted, TooManyRequests)):
            return True
        for attr in ("code", "status_code"):
            if getattr(error, attr, None) == HTTPStatus.TOO_MANY_REQUESTS:
                return True
        if RATE_LIMIT_STATUS in str(error):
            return True
        error = error.__cause__
    return False


class EmbeddingClient:
    """
    Turns texts into fixed-length vectors through the embedding provider.

    Order-preserving and one-to-one. Nothing is cached here; every call goes
    to the provider and is bounded by ``timeout`` seconds.
    """

    def __init__(
        self,
        model=None,
        timeout: Optional[float] = None,
        dimensions: Optional[int] = None,
    ):
        self.model = model if model is not None else get_embeddings()
        self.timeout = timeout or settings.EMBEDDING_TIMEOUT_SECONDS
        self.dimensions = dimensions or settings.EMBEDDING_DIMENSIONS

    async def embed(self, texts: Sequence[str]) -> List[List[float]]:
        if not texts:
            return []
        vectors = await self._call(self.model.aembed_documents(list(texts)))
        if len(vectors) != len(texts):
            raise ServiceUnavailable(
                f"Expected {len(texts)} embeddings, provider returned {len(vectors)}"
            )
        return [self._check(v) for v in vectors]

    async def embed_query(self, text: str) -> List[float]:
        return self._check(await self._call(self.model.aembed_query(text)))

    async def _call(self, coro):
        try:
            return await asyncio.wait_for(coro, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise ServiceUnavailable(
                f"Embedding call exceeded {self.timeout}s"
            ) from e
        except Exception as e:
            if is_rate_limit(e):
                logger.warning(f"⏳ Embedding provider rate limit: {e}")
                raise RateLimited(str(e)) from e
            logger.error(f"❌ Embedding provider error: {e}", exc_info=True)
            raise ServiceUnavailable(str(e)) from e

    def _check(self, vector) -> List[float]:
        vector = [float(v) for v in vector]
        if len(vector) != self.dimensions:
            raise ServiceUnavailable(
                f"Expected {self.dimensions}-dimensional embedding, got {len(vector)}"
            )
        return vector
