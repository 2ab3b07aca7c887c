"""Settings read from the environment (or a ``.env`` file)."""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field("sqlite://", alias="ACTIVE_RECORD_DATABASE_URL")
    debug: bool = Field(False, alias="ACTIVE_RECORD_DEBUG")
    echo_sql: bool = Field(False, alias="ACTIVE_RECORD_ECHO_SQL")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
