"""Configuration management for prefix-walk."""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    log_level: str = "INFO"
    otel_enabled: bool = False
    otel_service_name: str = "prefix-walk"

    # Cap on simultaneous listing calls; None leaves fan-out unbounded
    max_concurrency: Optional[int] = None
    default_region: str = "us-east-1"

    model_config = {
        "env_prefix": "PREFIX_WALK_",
        "case_sensitive": False,
    }


settings = Settings()
