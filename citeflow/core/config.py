from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration read from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    app_name: str = Field(default="Citeflow API")
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="%(levelname)s %(name)s %(message)s")

    # Retrieval configuration
    per_retriever_limit: int = Field(default=5, ge=1)
    combination_policy: str = Field(default="ranked")
    content_source: str = Field(default="exa")
    ranking_source: str = Field(default="serp")
    http_timeout_seconds: float = Field(default=10.0, gt=0)

    exa_api_key: str | None = Field(default=None)
    exa_max_characters: int = Field(default=1000, ge=1)
    serp_api_key: str | None = Field(default=None)

    qdrant_host: str = Field(default="localhost")
    qdrant_port: int = Field(default=6333)
    qdrant_api_key: str | None = Field(default=None)
    qdrant_collection_name: str = Field(default="text_collection")
    embedding_model_name: str = Field(default="sentence-transformers/all-MiniLM-L6-v2")

    # Generation configuration
    llm_provider: str = Field(default="openai")
    llm_api_key: str | None = Field(default=None)
    llm_base_url: str | None = Field(default=None)
    llm_model: str = Field(default="gpt-4o-mini")
    llm_max_tokens: int = Field(default=600, ge=1)
    llm_temperature: float = Field(default=0.0, ge=0.0, le=2.0)

    # Pipeline configuration
    channel_capacity: int = Field(default=1, ge=1)

    # Observability configuration
    otel_enabled: bool = Field(default=False)
    otel_service_name: str = Field(default="citeflow-api")
    otel_exporter_otlp_endpoint: str | None = Field(default=None)
    otel_exporter_otlp_headers: str | None = Field(default=None)


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of the application settings."""

    return Settings()
