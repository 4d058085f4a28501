"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

DEFAULT_API_BASE_URL = "http://localhost:8080/api/v1/banking"
API_PATH_SUFFIX = "/api/v1/banking"


class ClientConfig(BaseSettings):
    """Banking web client configuration"""
    
    # API configuration
    api_base_url: str = Field(
        default=DEFAULT_API_BASE_URL,
        validation_alias=AliasChoices("API_BASE_URL", "BANKING_API_URL", "api_base_url"),
    )
    
    # Notification configuration
    message_ttl_seconds: float = 5.0
    
    # Health polling configuration
    health_poll_interval_seconds: float = 30.0
    
    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    
    class Config:
        env_prefix = "BANKING_"
        env_file = ".env"
        case_sensitive = False
        populate_by_name = True
        extra = "ignore"
    
    @property
    def base_url(self) -> str:
        """API base URL without trailing slash"""
        return self.api_base_url.rstrip("/")
    
    @property
    def api_root_url(self) -> str:
        """Server root, i.e. the base URL with the versioned API path removed"""
        base = self.base_url
        if base.endswith(API_PATH_SUFFIX):
            return base[: -len(API_PATH_SUFFIX)]
        return base


# Global configuration instance
config = ClientConfig()


def get_config() -> ClientConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> ClientConfig:
    """Reload configuration from environment"""
    global config
    config = ClientConfig()
    return config
