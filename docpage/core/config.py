from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    env: str = Field(default="development", description="ENV")
    debug: bool = Field(default=False, description="DEBUG")

    # MongoDB
    mongodb_uri: str = Field(default="mongodb://localhost:27017", alias="MONGODB_URI")
    mongodb_db_name: str = Field(default="docpage", alias="MONGODB_DB_NAME")

    # Pagination
    pagination_default_limit: int = Field(default=10, gt=0, alias="PAGINATION_DEFAULT_LIMIT")
    pagination_max_limit: int | None = Field(default=None, gt=0, alias="PAGINATION_MAX_LIMIT")


@lru_cache
def get_settings() -> Settings:
    return Settings()
