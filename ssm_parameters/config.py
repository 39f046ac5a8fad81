"""
Configuration management for the SSM parameter cache.
"""

from functools import lru_cache
from typing import Any, Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logging import configure_logging
from .retry import RetryConfig


class ParameterStoreSettings(BaseSettings):
    """Settings read from ``SSM_PARAMETERS_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="SSM_PARAMETERS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Cache
    max_age: int = Field(default=3600, ge=0)
    with_decryption: bool = True
    log_level: str = "info"

    # AWS client
    region_name: Optional[str] = None
    endpoint_url: Optional[str] = None

    # Retry of transport failures
    retry_max_attempts: int = Field(default=3, ge=1)
    retry_base_delay: float = Field(default=0.5, ge=0.0)
    retry_max_delay: float = Field(default=5.0, ge=0.0)

    def ssm_configuration(self) -> Dict[str, Any]:
        """Keyword arguments for ``boto3.client("ssm", ...)``."""
        config: Dict[str, Any] = {}
        if self.region_name:
            config["region_name"] = self.region_name
        if self.endpoint_url:
            config["endpoint_url"] = self.endpoint_url
        return config

    def configure_logging(self, service_name: str = "ssm_parameters") -> None:
        """Configure structured logging at ``log_level``."""
        configure_logging(service_name, self.log_level)

    def retry_config(self) -> RetryConfig:
        return RetryConfig(
            max_attempts=self.retry_max_attempts,
            base_delay=self.retry_base_delay,
            max_delay=self.retry_max_delay,
        )


@lru_cache(maxsize=1)
def get_settings() -> ParameterStoreSettings:
    """Get the process-wide settings instance."""
    return ParameterStoreSettings()
