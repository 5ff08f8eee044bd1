"""
Resource Actions - Configuration
"""

from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache

from shared.constants import BackendType, ServiceName


class Settings(BaseSettings):
    """Application settings."""

    service_name: str = Field(default=ServiceName.RESOURCE_ACTIONS.value)
    service_version: str = Field(default="0.1.0")

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8006)
    debug: bool = Field(default=False)

    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=True)

    # Managing service
    backend: BackendType = Field(
        default=BackendType.ARGOCD,
        description="Backend serving inventories and actions"
    )
    server_url: str = Field(
        default="https://argocd-server",
        description="Base URL of the managing service"
    )
    auth_token: str = Field(
        default="",
        description="Bearer token for the managing service"
    )
    verify_tls: bool = Field(
        default=True,
        description="Verify the managing service's TLS certificate"
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for a single request to the managing service"
    )

    # Retries apply to read-only requests only
    read_retry_attempts: int = Field(
        default=3,
        description="Attempts for inventory and action-listing requests"
    )
    read_retry_base_delay_seconds: float = Field(
        default=0.5,
        description="Initial backoff between read retries"
    )

    # CLI
    cli_command: str = Field(
        default="resource-actions run",
        description="Command shown in deprecation hints"
    )

    class Config:
        env_prefix = ""
        case_sensitive = False
        env_file = ".env"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
