"""
Core module for spot-tagger.

This module contains the foundational components used throughout
the application:
    - config: Configuration loading and validation
    - exceptions: Custom exception classes
    - logger: Logging setup and utilities

Usage:
    from spot_tagger.core import (
        Config, load_config,
        setup_logging, get_logger,
        SpotTaggerError, ConfigError
    )
"""

from spot_tagger.core.config import (
    CatalogConfig,
    Config,
    LoggingConfig,
    SpotifyConfig,
    TaggingConfig,
    load_config,
)
from spot_tagger.core.exceptions import (
    ConfigError,
    InvalidReferenceError,
    RemoteServiceError,
    SpotTaggerError,
    TagEncodingError,
    UnsupportedFormatError,
)
from spot_tagger.core.logger import (
    get_logger,
    log_tag_failure,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "SpotifyConfig",
    "CatalogConfig",
    "TaggingConfig",
    "LoggingConfig",
    "load_config",
    # Exceptions
    "SpotTaggerError",
    "ConfigError",
    "InvalidReferenceError",
    "RemoteServiceError",
    "UnsupportedFormatError",
    "TagEncodingError",
    # Logger
    "setup_logging",
    "get_logger",
    "log_tag_failure",
    "shutdown_logging",
]
