"""Configuration loading and models for httprelay."""

from httprelay.config.loader import ConfigLoadError, YAMLConfigLoader, load_settings
from httprelay.config.models import (
    HTTP_METHODS,
    ChannelConfig,
    ProcessorConfig,
    RelaySettings,
    RetrySettings,
)

__all__ = [
    "ChannelConfig",
    "ConfigLoadError",
    "HTTP_METHODS",
    "ProcessorConfig",
    "RelaySettings",
    "RetrySettings",
    "YAMLConfigLoader",
    "load_settings",
]
