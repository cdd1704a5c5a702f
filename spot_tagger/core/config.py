"""
Configuration management for spot-tagger.

This module handles loading, validating, and providing access to the
application configuration stored in config.yaml.

The configuration file contains:
    - Spotify API credentials (client_id, client_secret)
    - Optional market (country code) applied to catalog requests
    - Catalog expansion options
    - Tag writing options (separator, ID3 version, cover embedding)
    - Optional log directory

Configuration File Location:
    By default config.yaml is read from the current working directory.
    The CLI accepts --config to point somewhere else.

Example config.yaml:
    spotify:
      client_id: "your_client_id_here"
      client_secret: "your_client_secret_here"
      market: "US"

    catalog:
      paginate_playlists: false

    tagging:
      separator: ", "
      id3_v24: false
      embed_cover: true

    logging:
      directory: "~/.spot-tagger"
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from spot_tagger.core.exceptions import ConfigError


# Default configuration file name (always in current working directory)
CONFIG_FILENAME = "config.yaml"

# Default directory for log files when the 'logging' section is missing
DEFAULT_LOG_DIRECTORY = "~/.spot-tagger"

_MARKET_PATTERN = re.compile(r"^[A-Z]{2}$")


@dataclass(frozen=True)
class SpotifyConfig:
    """
    Spotify API credentials configuration.

    These credentials are obtained from the Spotify Developer Dashboard:
    https://developer.spotify.com/dashboard

    Attributes:
        client_id: The Spotify application client ID.
        client_secret: The Spotify application client secret.
        market: Optional ISO 3166-1 alpha-2 country code. When set, every
                track, album and playlist request is relinked for that market.
    """
    client_id: str
    client_secret: str
    market: str | None = None


@dataclass(frozen=True)
class CatalogConfig:
    """
    Catalog expansion configuration.

    Attributes:
        paginate_playlists: If True, playlist expansion follows every page.
                            If False (default), only the first page of
                            playlist items is expanded.
    """
    paginate_playlists: bool = False


@dataclass(frozen=True)
class TaggingConfig:
    """
    Tag writing configuration.

    Attributes:
        separator: String used to join multi-valued fields such as artists.
                   Default: "" (values are concatenated).
        id3_v24: Write ID3v2.4 instead of the default ID3v2.3.
        embed_cover: Download and embed album art when tagging.
    """
    separator: str = ""
    id3_v24: bool = False
    embed_cover: bool = True


@dataclass(frozen=True)
class LoggingConfig:
    """
    Logging configuration.

    Attributes:
        directory: Directory under which the 'logs' folder is created.
    """
    directory: Path


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    Created by load_config() and treated as immutable.

    Attributes:
        spotify: Spotify API credentials and market.
        catalog: Catalog expansion settings.
        tagging: Tag writing settings.
        logging: Log file settings.

    Example:
        config = load_config()
        print(f"Market: {config.spotify.market or 'none'}")
        print(f"Separator: {config.tagging.separator!r}")
    """
    spotify: SpotifyConfig
    catalog: CatalogConfig
    tagging: TaggingConfig
    logging: LoggingConfig


def load_config(config_path: Path | None = None) -> Config:
    """
    Load and validate configuration from config.yaml.

    Args:
        config_path: Optional explicit path to config file.
                     If None, looks for config.yaml in current working directory.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If the config file is not found, has invalid YAML syntax,
                     is missing required fields, or contains invalid values.

    Behavior:
        1. Locate config file (explicit path or CWD/config.yaml)
        2. Read and parse YAML content
        3. Validate structure (required sections exist)
        4. Parse each section, applying defaults for optional ones
        5. Create and return frozen Config object
    """
    # Resolve config path
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    # Check file exists
    if not config_path.exists():
        raise ConfigError(
            f"Configuration file not found: {config_path}",
            details={"file_path": str(config_path)}
        )

    # Read file content
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    # Parse YAML
    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )

    _validate_config(raw_config)

    return Config(
        spotify=_parse_spotify_config(raw_config["spotify"]),
        catalog=_parse_catalog_config(raw_config.get("catalog")),
        tagging=_parse_tagging_config(raw_config.get("tagging")),
        logging=_parse_logging_config(raw_config.get("logging")),
    )


def _validate_config(raw_config: dict[str, Any]) -> None:
    """
    Validate the raw configuration dictionary structure.

    Args:
        raw_config: Dictionary parsed from config.yaml.

    Raises:
        ConfigError: If a required section is missing or any present
                     section is not a mapping.
    """
    if "spotify" not in raw_config:
        raise ConfigError(
            "Missing required section: 'spotify'",
            details={"missing_section": "spotify"}
        )

    for section in ("spotify", "catalog", "tagging", "logging"):
        value = raw_config.get(section)
        if section in raw_config and value is not None and not isinstance(value, dict):
            raise ConfigError(
                f"Section '{section}' must be a dictionary",
                details={"section": section}
            )


def _parse_spotify_config(spotify_section: dict[str, Any] | None) -> SpotifyConfig:
    """
    Parse and validate the Spotify configuration section.

    Raises:
        ConfigError: If client_id or client_secret is missing or empty,
                     or if market is not a two-letter country code.
    """
    spotify_section = spotify_section or {}
    client_id = spotify_section.get("client_id", "")
    client_secret = spotify_section.get("client_secret", "")

    if not isinstance(client_id, str) or not client_id.strip():
        raise ConfigError(
            "'spotify.client_id' must be a non-empty string",
            details={"field": "spotify.client_id"}
        )

    if not isinstance(client_secret, str) or not client_secret.strip():
        raise ConfigError(
            "'spotify.client_secret' must be a non-empty string",
            details={"field": "spotify.client_secret"}
        )

    market = spotify_section.get("market")
    if market is not None:
        if not isinstance(market, str) or not _MARKET_PATTERN.match(market.strip().upper()):
            raise ConfigError(
                "'spotify.market' must be a two-letter country code",
                details={"field": "spotify.market", "value": market}
            )
        market = market.strip().upper()

    return SpotifyConfig(
        client_id=client_id.strip(),
        client_secret=client_secret.strip(),
        market=market
    )


def _parse_catalog_config(catalog_section: dict[str, Any] | None) -> CatalogConfig:
    """Parse the optional 'catalog' section."""
    if not catalog_section:
        return CatalogConfig()

    paginate = catalog_section.get("paginate_playlists", False)
    if not isinstance(paginate, bool):
        raise ConfigError(
            "'catalog.paginate_playlists' must be true or false",
            details={"field": "catalog.paginate_playlists", "value": paginate}
        )

    return CatalogConfig(paginate_playlists=paginate)


def _parse_tagging_config(tagging_section: dict[str, Any] | None) -> TaggingConfig:
    """
    Parse the optional 'tagging' section.

    Applies defaults if section is missing or fields are not specified.

    Raises:
        ConfigError: If separator is not a string, or a flag is not boolean.
    """
    if not tagging_section:
        return TaggingConfig()

    separator = tagging_section.get("separator", "")
    if separator is None:
        separator = ""
    if not isinstance(separator, str):
        raise ConfigError(
            "'tagging.separator' must be a string",
            details={"field": "tagging.separator", "value": separator}
        )

    flags = {}
    for name, default in (("id3_v24", False), ("embed_cover", True)):
        value = tagging_section.get(name, default)
        if not isinstance(value, bool):
            raise ConfigError(
                f"'tagging.{name}' must be true or false",
                details={"field": f"tagging.{name}", "value": value}
            )
        flags[name] = value

    return TaggingConfig(separator=separator, **flags)


def _parse_logging_config(logging_section: dict[str, Any] | None) -> LoggingConfig:
    """
    Parse the optional 'logging' section.

    Expands ~ to home directory and converts to absolute Path.
    Does NOT create the directory (setup_logging does that).
    """
    directory = DEFAULT_LOG_DIRECTORY
    if logging_section:
        raw_directory = logging_section.get("directory", DEFAULT_LOG_DIRECTORY)
        if not isinstance(raw_directory, str) or not raw_directory.strip():
            raise ConfigError(
                "'logging.directory' must be a non-empty string",
                details={"field": "logging.directory"}
            )
        directory = raw_directory.strip()

    return LoggingConfig(directory=Path(directory).expanduser().resolve())
