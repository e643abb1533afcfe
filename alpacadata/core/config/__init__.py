"""Configuration management module."""

from alpacadata.core.config.settings import (
    DEFAULT_DATA_URL,
    AlpacaConfig,
    ConfigManager,
    CredentialsConfig,
    EndpointConfig,
    HttpSettings,
    LoggingConfig,
    PaginationConfig,
    StorageConfig,
    load_config_from_env,
)

__all__ = [
    "DEFAULT_DATA_URL",
    "AlpacaConfig",
    "ConfigManager",
    "CredentialsConfig",
    "EndpointConfig",
    "HttpSettings",
    "LoggingConfig",
    "PaginationConfig",
    "StorageConfig",
    "load_config_from_env",
]
