# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""Configuration management for hubkit."""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Publishing surface
    server_name: str = Field(default="hubkit", description="Name registered on the hub")
    server_host: Optional[str] = Field(
        default=None, description="Bind address (default: first non-loopback IPv4)"
    )
    server_port: int = Field(default=9000, description="Publishing surface port")

    # Remote hub
    hub_address: Optional[str] = Field(default=None, description="Hub IP address")
    hub_port: int = Field(default=3000, description="Hub API port")
    hub_request_timeout: float = Field(default=5.0, description="Hub request timeout (seconds)")

    # Adapters
    adapters_file: Optional[str] = Field(
        default=None, description="JSON file with adapter descriptors"
    )
    adapter_init_timeout: Optional[float] = Field(
        default=None, description="Upper bound for one adapter initializer run (seconds)"
    )

    # Search
    search_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    search_max_results: int = Field(default=10, ge=1, le=10)

    # Logging
    log_level: str = "INFO"


# Global settings instance
settings = Settings()
