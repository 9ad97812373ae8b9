from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///./lotstock.db"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="LOTSTOCK_", extra="ignore")

    app_name: str = "Lotstock"
    env: str = "dev"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"

    database_url: str = DEFAULT_DATABASE_URL

    low_stock_fallback_reorder_level: int = Field(
        default=10,
        ge=0,
        description="Reorder level assumed for products without any valid batch",
    )
    checkout_max_attempts: int = Field(default=3, ge=1)

    def model_post_init(self, __context) -> None:
        if self.env.lower() == "dev":
            return
        if self.database_url == DEFAULT_DATABASE_URL:
            raise ValueError(
                "the local sqlite database is not allowed outside dev mode; set env var: LOTSTOCK_DATABASE_URL"
            )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
