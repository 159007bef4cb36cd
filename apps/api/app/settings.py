import os
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # Store backend: sql (local/postgres tables), postgrest (hosted REST), memory (demo rows)
    store_backend: str = Field(default="sql", alias="STORE_BACKEND")
    region: str = Field(default="IN", alias="REGION")

    # Environment and CORS
    environment: str = Field("dev", alias="ENVIRONMENT")  # dev|prod
    allow_origins: str = Field("http://localhost:3000", alias="ALLOW_ORIGINS")

    use_sqlite: bool = Field(default=True, alias="USE_SQLITE")
    database_url: str | None = Field(default=None, alias="DATABASE_URL")

    postgrest_url: str | None = Field(default=None, alias="POSTGREST_URL")
    postgrest_key: str | None = Field(default=None, alias="POSTGREST_KEY")
    store_timeout_s: float = Field(10.0, alias="STORE_TIMEOUT_S")

    # --- Bulk loading ---
    loader_batch_size: int = Field(1000, alias="LOADER_BATCH_SIZE")
    loader_workers: int = Field(1, alias="LOADER_WORKERS")
    catalog_max_age_hours: int = Field(24, alias="CATALOG_MAX_AGE_HOURS")
    seed_demo_catalog: bool = Field(True, alias="SEED_DEMO_CATALOG")

    # --- Latency SLO ---
    discover_target_ms: int = Field(100, alias="DISCOVER_TARGET_MS")

    # --- Build info ---
    app_version: str = Field("0.1.0", alias="APP_VERSION")
    git_sha: str | None = Field(None, alias="GIT_SHA")

    def resolved_database_url(self) -> str:
        if self.use_sqlite:
            return (self.database_url or "sqlite:///./.local/catalog.db")
        if self.database_url:
            return self.database_url
        user = os.getenv("POSTGRES_USER", "dev")
        password = os.getenv("POSTGRES_PASSWORD", "dev")
        host = os.getenv("POSTGRES_HOST", "localhost")
        port = os.getenv("POSTGRES_PORT", "5432")
        db = os.getenv("POSTGRES_DB", "catalog")
        return f"postgresql+psycopg2://{user}:{password}@{host}:{port}/{db}"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
