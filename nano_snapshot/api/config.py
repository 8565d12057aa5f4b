"""Configuration for FastAPI application."""

import json
from typing import List, Optional, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # API Configuration
    api_prefix: str = "/api/v1"
    api_title: str = "nano-snapshot API"
    api_version: str = "1.0.0"
    allowed_origins: Union[str, List[str]] = ["*"]

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_allowed_origins(cls, v):
        """Parse allowed_origins from string or list."""
        if isinstance(v, str):
            # If it's a JSON array string, parse it
            if v.startswith("["):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    return [v]
            # Single origin string
            return [v]
        return v

    # Cluster overrides on top of the SOLR_* environment
    cluster_backend: Optional[str] = None
    backup_location: Optional[str] = None

    # Job tracking
    redis_url: Optional[str] = None
    redis_password: Optional[str] = None

    # Status streaming
    stream_poll_interval: float = Field(default=1.0, gt=0, description="Seconds between status polls")
    stream_timeout: float = Field(default=3600.0, gt=0, description="Give up streaming after this many seconds")

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore extra environment variables


settings = Settings()
