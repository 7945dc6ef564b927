"""Error kinds raised by the ingestion and query pipelines.

Each error carries the HTTP status the API layer answers with.
"""


class CatalogSearchError(Exception):
    status_code = 500
    public_message = "Search failed"

    def __init__(self, message: str = ""):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class InvalidInput(CatalogSearchError):
    status_code = 400
    public_message = "Query required"


class EmbeddingServiceFailure(CatalogSearchError):
    status_code = 503
    public_message = "Embedding service unavailable"


class ServiceUnavailable(EmbeddingServiceFailure):
    pass


class RateLimited(EmbeddingServiceFailure):
    status_code = 429
    public_message = "Embedding service rate limit reached"


class StoreFailure(CatalogSearchError):
    public_message = "Vector store query failed"


class GenerationServiceFailure(CatalogSearchError):
    status_code = 502
    public_message = "Advice generation failed"


class IngestionBatchFailure(CatalogSearchError):
    public_message = "Ingestion batch failed"

    def __init__(self, batch_number: int, message: str = ""):
        super().__init__(message or f"Batch {batch_number} failed")
        self.batch_number = batch_number
