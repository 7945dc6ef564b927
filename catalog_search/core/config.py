from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "Catalog Search Service"
    API_V1_STR: str = "/api/v1"

    # Database
    DB_HOST: str | None = None
    DB_PORT: str | None = None
    DB_NAME: str | None = None
    DB_USERNAME: str | None = None
    DB_PASSWORD: str | None = None
    DATABASE_URL: str | None = None
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self._async_driver(self.DATABASE_URL)

        if (
            self.DB_HOST
            and self.DB_PORT
            and self.DB_NAME
            and self.DB_USERNAME
            and self.DB_PASSWORD
        ):
            return f"postgresql+asyncpg://{self.DB_USERNAME}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

        raise ValueError(
            "Database configuration is incomplete. define DATABASE_URL or (DB_HOST, DB_PORT, DB_NAME, DB_USERNAME, DB_PASSWORD)."
        )

    @staticmethod
    def _async_driver(url: str) -> str:
        for prefix in ("postgres://", "postgresql://"):
            if url.startswith(prefix):
                return "postgresql+asyncpg://" + url[len(prefix):]
        return url

    # AI Providers
    GROQ_API_KEY: str
    GOOGLE_API_KEY: str

    LLM_MODEL: str = "llama-3.3-70b-versatile"
    LLM_TEMPERATURE: float = 0.7
    EMBEDDING_MODEL: str = "models/text-embedding-004"
    EMBEDDING_DIMENSIONS: int = 768

    # Timeouts (seconds) for external calls
    EMBEDDING_TIMEOUT_SECONDS: float = 30.0
    ADVICE_TIMEOUT_SECONDS: float = 10.0

    # Search
    SIMILARITY_THRESHOLD: float = 0.32
    MAX_RESULTS: int = 50
    POPULAR_SALES_THRESHOLD: int = 50
    SCARCE_STOCK_THRESHOLD: int = 5

    # Ingestion
    INGESTION_BATCH_SIZE: int = 50
    CATALOG_DATA_DIR: str = "data"

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
