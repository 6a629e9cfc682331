"""
Shared configuration management for the Storefront Access Layer.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Upstream commerce platform
    shop_domain: str = Field(default="example.myshopify.com")
    admin_access_token: str = Field(default="")
    graphql_api_version: str = Field(default="2024-10")
    rest_api_version: str = Field(default="2024-01")
    upstream_timeout_seconds: float = Field(default=10.0, gt=0)

    # In-process response cache
    cache_max_entries: Optional[int] = Field(default=None, gt=0)
    cache_sweep_interval_seconds: float = Field(default=60.0, gt=0)

    # Pre-warming
    prewarm_enabled: bool = Field(default=True)
    prewarm_schedule: str = Field(default="*/4 * * * *")
    prewarm_initial_delay_seconds: float = Field(default=5.0, ge=0)

    # HTTP surface
    frontend_url: str = Field(default="*")
    revenue_currency: str = Field(default="INR")


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port)
