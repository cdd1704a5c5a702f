"""
Spotify module for spot-tagger.

    - uri: Parse spotify: URIs and open.spotify.com URLs
    - session: Build an authenticated spotipy session
    - client: Async catalog lookups and search
    - expander: Playlist, album and artist expansion
    - models: ResolvedItem variants and TrackRecord
"""

from spot_tagger.spotify.client import MetadataClient
from spot_tagger.spotify.expander import CatalogExpander
from spot_tagger.spotify.models import (
    ResolvedAlbum,
    ResolvedArtist,
    ResolvedItem,
    ResolvedOther,
    ResolvedPlaylist,
    ResolvedTrack,
    TrackRecord,
)
from spot_tagger.spotify.session import create_spotify_session
from spot_tagger.spotify.uri import CanonicalReference, ReferenceKind, parse_uri

__all__ = [
    "CanonicalReference",
    "ReferenceKind",
    "parse_uri",
    "create_spotify_session",
    "MetadataClient",
    "CatalogExpander",
    "ResolvedItem",
    "ResolvedTrack",
    "ResolvedAlbum",
    "ResolvedPlaylist",
    "ResolvedArtist",
    "ResolvedOther",
    "TrackRecord",
]
