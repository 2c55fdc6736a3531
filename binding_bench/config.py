"""
Configuration settings for the parameter binding benchmark.

Uses Pydantic Settings to load environment variables for the database
connection, logging, and benchmark defaults. A full DSN (`DB_DSN`) takes
precedence over the individual connection fields.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    db_dsn: Optional[str] = Field(None, alias="DB_DSN")
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("binding_benchmark", alias="DB_NAME")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Benchmark defaults
    benchmark_iterations: int = Field(100_000, alias="BENCHMARK_ITERATIONS")
    benchmark_warmup: int = Field(1_000, alias="BENCHMARK_WARMUP")
    benchmark_seed: Optional[int] = Field(None, alias="BENCHMARK_SEED")
    benchmark_settle_gc: bool = Field(True, alias="BENCHMARK_SETTLE_GC")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
