"""
Configuration settings for the N+1 query benchmark.

Uses Pydantic Settings to load environment variables for the database
connection, logging, the HTTP API and benchmark defaults.
"""
from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    database_url: Optional[str] = Field(None, alias="DATABASE_URL")
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("nplusone", alias="DB_NAME")
    db_pool_min_size: int = Field(1, alias="DB_POOL_MIN_SIZE")
    db_pool_max_size: int = Field(10, alias="DB_POOL_MAX_SIZE")
    db_connect_attempts: int = Field(10, alias="DB_CONNECT_ATTEMPTS")
    db_connect_delay_seconds: float = Field(2.0, alias="DB_CONNECT_DELAY_SECONDS")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    app_host: str = Field("0.0.0.0", alias="APP_HOST")
    app_port: int = Field(3000, alias="APP_PORT")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Benchmark defaults
    default_limit: int = Field(10, alias="DEFAULT_LIMIT")
    benchmark_sizes: str = Field("10,50,100", alias="BENCHMARK_SIZES")
    results_dir: str = Field("results", alias="RESULTS_DIR")
    sql_preview_length: int = Field(100, alias="SQL_PREVIEW_LENGTH")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def dsn(self) -> str:
        """DATABASE_URL when set, otherwise a DSN composed from the DB_* fields."""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    def sizes(self) -> List[int]:
        """Parse BENCHMARK_SIZES ("10,50,100") into a list of ints."""
        return parse_sizes(self.benchmark_sizes)


def parse_sizes(raw: str) -> List[int]:
    sizes = [int(part) for part in raw.split(",") if part.strip()]
    if any(size < 0 for size in sizes):
        raise ValueError(f"Benchmark sizes must be non-negative, got {raw!r}")
    return sizes


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings", "parse_sizes"]
