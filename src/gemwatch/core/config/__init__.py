"""Configuration loading and validation."""

from .models import (
    AppConfig,
    BrowserConfig,
    LoggingConfig,
    SiteConfig,
    StorageConfig,
    TimingConfig,
)
from .loader import ConfigError, load_app_config

__all__ = [
    # Config models
    "AppConfig",
    "BrowserConfig",
    "LoggingConfig",
    "SiteConfig",
    "StorageConfig",
    "TimingConfig",
    # Loaders
    "ConfigError",
    "load_app_config",
]
