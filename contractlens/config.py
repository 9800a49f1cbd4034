"""
ContractLens Configuration — pydantic-settings based.

All settings are read from environment variables or .env file.
Every value has a default, so the analyzer works with no configuration.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings sourced from environment variables."""

    # ── Rule Engine ──
    parallel_rules: bool = Field(
        default=False,
        description="Run individual rules on a thread pool. Result order is unchanged.",
    )
    rule_workers: int = Field(
        default=4, ge=1, description="Thread pool size when parallel_rules is on"
    )

    # ── Analysis ──
    max_source_length: int = Field(
        default=2_000_000,
        description="Sources longer than this (characters) are truncated before analysis",
    )
    loop_iteration_estimate: int = Field(
        default=10,
        ge=1,
        description="Assumed iterations per loop when scaling gas costs",
    )

    # ── Server ──
    api_max_source_length: int = Field(
        default=200_000, description="Max source size accepted by POST /analyze"
    )
    cors_origins: list[str] = Field(
        default=["*"], description="Allowed CORS origins"
    )
    log_level: str = Field(default="INFO", description="Root log level for the API")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Singleton instance, imported by other modules
settings = Settings()
