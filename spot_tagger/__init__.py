"""
spot-tagger: Resolve Spotify references and tag local audio files.

This package turns Spotify URIs and web player links into structured
metadata, expands playlists, albums and artists into flat ordered track
lists, and writes track metadata into MP3 (ID3v2) and Ogg Vorbis
(Vorbis comment) files.

Modules:
    core/       - Configuration, logging, exceptions
    spotify/    - URI parsing, Spotify Web API client, catalog expansion
    tag/        - Format-specific tag writers and the metadata embedder
    cli.py      - Command-line interface

Usage:
    Command Line:
        spot-tag resolve "https://open.spotify.com/album/..."
        spot-tag expand spotify:playlist:...
        spot-tag search "artist title"
        spot-tag tag song.mp3 spotify:track:...

    Python API:
        import asyncio
        from spot_tagger.core import load_config
        from spot_tagger.spotify import (
            CatalogExpander, MetadataClient, create_spotify_session, parse_uri
        )
        from spot_tagger.tag.embedder import MetadataEmbedder

        config = load_config()
        client = MetadataClient(
            create_spotify_session(config.spotify),
            market=config.spotify.market
        )
        tracks = asyncio.run(CatalogExpander(client).expand(parse_uri(url)))
        MetadataEmbedder(separator=", ").embed_metadata(Path("01.mp3"), tracks[0])

Dependencies:
    - spotipy: Spotify Web API client
    - mutagen: ID3 and Vorbis comment tagging
    - requests: Cover art download
    - rich-click: CLI framework and colors
    - tqdm: Progress bars and tqdm-safe console logging
    - pyyaml: Configuration file parsing
"""

__version__ = "0.1.0"
__author__ = "spot-tagger"
__license__ = "MIT"

# Convenience imports for common usage
from spot_tagger.core import (
    Config,
    ConfigError,
    InvalidReferenceError,
    RemoteServiceError,
    SpotTaggerError,
    TagEncodingError,
    UnsupportedFormatError,
    get_logger,
    load_config,
    setup_logging,
)
from spot_tagger.spotify import (
    CanonicalReference,
    CatalogExpander,
    MetadataClient,
    ReferenceKind,
    TrackRecord,
    parse_uri,
)
from spot_tagger.tag import AudioFormat, Field, TagWriter, open_tag_writer

__all__ = [
    # Version
    "__version__",
    # Core
    "Config",
    "load_config",
    "setup_logging",
    "get_logger",
    # Exceptions
    "SpotTaggerError",
    "ConfigError",
    "InvalidReferenceError",
    "RemoteServiceError",
    "UnsupportedFormatError",
    "TagEncodingError",
    # Spotify
    "CanonicalReference",
    "ReferenceKind",
    "parse_uri",
    "MetadataClient",
    "CatalogExpander",
    "TrackRecord",
    # Tagging
    "AudioFormat",
    "Field",
    "TagWriter",
    "open_tag_writer",
]
