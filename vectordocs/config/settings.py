"""Application settings loaded from environment variables via pydantic-settings.

Values are read from (highest priority first):

  1. **Environment variables** -- e.g. ``CHROMA_URL=http://chroma:8000``
  2. **.env file** -- key=value lines in the working directory
  3. The defaults declared below

Field names map to upper-case variable names automatically
(``ollama_url`` <- ``OLLAMA_URL``).  A single instance is built at process
start and handed to every provider and service; nothing else in the
package reads the environment.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from vectordocs.models.ingestion import ChunkFailurePolicy


class Settings(BaseSettings):
    """vectordocs application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Embedding service (Ollama-compatible) ===
    ollama_url: str = "http://localhost:11434"
    embedding_model: str = "embeddinggemma:300m"

    # === Vector store (Chroma v2 REST API) ===
    chroma_url: str = "http://localhost:8000"
    chroma_tenant: str = "default_tenant"
    chroma_database: str = "default_database"
    collection_name: str = "documents"

    # === Ingestion ===
    page_timeout_seconds: float = Field(default=10.0, gt=0)
    default_chunk_size: int = Field(default=100, gt=0)
    default_chunk_stride: int = Field(default=80, gt=0)
    max_upload_bytes: int = Field(default=32 * 1024 * 1024, gt=0)
    max_concurrent_uploads: int = Field(default=1, ge=1)
    chunk_failure_policy: ChunkFailurePolicy = ChunkFailurePolicy.CONTINUE

    # === Search ===
    search_top_k: int = Field(default=5, gt=0)

    # === HTTP client ===
    http_timeout_seconds: float = Field(default=30.0, gt=0)

    # === App Config ===
    host: str = "0.0.0.0"
    port: int = 8080
    app_env: str = "development"
    log_level: str = "INFO"

    @property
    def collections_path(self) -> str:
        """Return the tenant/database-scoped collections path of the Chroma v2 API."""
        return (
            f"/api/v2/tenants/{self.chroma_tenant}"
            f"/databases/{self.chroma_database}/collections"
        )
