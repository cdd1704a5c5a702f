"""
Data models for Spotify entities.

This module defines the immutable objects handed out by MetadataClient
and CatalogExpander:

    - ResolvedItem variants: the raw catalog object a reference resolved to,
      tagged with its kind (ResolvedTrack, ResolvedAlbum, ResolvedPlaylist,
      ResolvedArtist, ResolvedOther).
    - TrackRecord: normalized track-level metadata, the unit catalog
      expansion produces and MetadataEmbedder consumes.

Design Decisions:
    - All dataclasses are frozen (immutable)
    - Resolved payloads keep the Web API JSON untouched; only TrackRecord
      normalizes fields
    - Simplified track objects (album listings) carry no album, so the
      album context is passed in separately

Usage:
    from spot_tagger.spotify.models import TrackRecord

    record = TrackRecord.from_spotify_api(track_json)
    record.artists  # ("Calvin Harris", "Dua Lipa")
"""

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class ResolvedTrack:
    """A full track object as returned by GET /tracks/{id}."""
    payload: dict[str, Any] = field(repr=False)

    @property
    def name(self) -> str:
        return self.payload.get("name", "")

    def to_record(self) -> "TrackRecord":
        return TrackRecord.from_spotify_api(self.payload)


@dataclass(frozen=True)
class ResolvedAlbum:
    """A full album object, including the first page of its tracks."""
    payload: dict[str, Any] = field(repr=False)

    @property
    def name(self) -> str:
        return self.payload.get("name", "")


@dataclass(frozen=True)
class ResolvedPlaylist:
    """A full playlist object, including the first page of its items."""
    payload: dict[str, Any] = field(repr=False)

    @property
    def name(self) -> str:
        return self.payload.get("name", "")


@dataclass(frozen=True)
class ResolvedArtist:
    """A full artist object (no market applies to artists)."""
    payload: dict[str, Any] = field(repr=False)

    @property
    def name(self) -> str:
        return self.payload.get("name", "")


@dataclass(frozen=True)
class ResolvedOther:
    """
    A reference of an unsupported kind. Never fetched.

    Attributes:
        uri: The reference exactly as the user gave it (URI or web URL).
    """
    uri: str

    @property
    def name(self) -> str:
        return self.uri


ResolvedItem = Union[ResolvedTrack, ResolvedAlbum, ResolvedPlaylist, ResolvedArtist, ResolvedOther]


@dataclass(frozen=True)
class TrackRecord:
    """
    Immutable track-level metadata.

    Attributes:
        spotify_id: Spotify track ID (22-character base62 string).
        uri: Canonical "spotify:track:<id>" URI.
        name: Track title.
        artists: All credited artist names, in credit order.
        album: Album name ("" when unknown).
        album_artists: Album artist names, in credit order.
        track_number: Position within the disc.
        disc_number: Disc number for multi-disc albums.
        duration_ms: Duration in milliseconds.
        release_date: Album release date as Spotify reports it
                      ("2024", "2024-01" or "2024-01-15").
        isrc: International Standard Recording Code, if known.
        explicit: Explicit content flag.
        cover_url: Largest album image URL, if any.
        genres: Genres from the full album object (often empty).
        label: Record label from the full album object.
    """
    spotify_id: str
    uri: str
    name: str
    artists: tuple[str, ...]
    album: str = ""
    album_artists: tuple[str, ...] = ()
    track_number: int = 1
    disc_number: int = 1
    duration_ms: int = 0
    release_date: str = ""
    isrc: str | None = None
    explicit: bool = False
    cover_url: str | None = None
    genres: tuple[str, ...] = ()
    label: str | None = None

    @property
    def artist(self) -> str:
        """Primary artist (first credited)."""
        return self.artists[0] if self.artists else ""

    @property
    def spotify_url(self) -> str:
        return f"https://open.spotify.com/track/{self.spotify_id}"

    @classmethod
    def from_spotify_api(
        cls,
        track_data: dict[str, Any],
        album_data: dict[str, Any] | None = None
    ) -> "TrackRecord":
        """
        Create a TrackRecord from a Spotify API track object.

        Args:
            track_data: A full track object (from track(), search or a
                        playlist item) or a simplified track object (from
                        album_tracks()).
            album_data: Optional full album object. Required to fill album
                        fields for simplified tracks; for full tracks it
                        adds label and genres.

        Returns:
            TrackRecord populated from the payloads.

        Behavior:
            1. Extract basic track info (id, uri, name, duration, explicit)
            2. Extract artist names in credit order
            3. Take album info from album_data if given, else from the
               album embedded in track_data
            4. Pick the highest-resolution cover image
        """
        spotify_id = track_data.get("id") or ""
        uri = track_data.get("uri") or f"spotify:track:{spotify_id}"

        artists = tuple(a["name"] for a in track_data.get("artists", []) if a.get("name"))

        album_info = album_data or track_data.get("album") or {}
        album_artists = tuple(
            a["name"] for a in album_info.get("artists", []) if a.get("name")
        )

        label = None
        genres: tuple[str, ...] = ()
        if album_data:
            label = album_data.get("label") or None
            genres = tuple(album_data.get("genres") or ())

        return cls(
            spotify_id=spotify_id,
            uri=uri,
            name=track_data.get("name", ""),
            artists=artists,
            album=album_info.get("name", ""),
            album_artists=album_artists,
            track_number=track_data.get("track_number") or 1,
            disc_number=track_data.get("disc_number") or 1,
            duration_ms=track_data.get("duration_ms") or 0,
            release_date=album_info.get("release_date") or "",
            isrc=(track_data.get("external_ids") or {}).get("isrc"),
            explicit=bool(track_data.get("explicit", False)),
            cover_url=_best_image_url(album_info.get("images") or []),
            genres=genres,
            label=label,
        )


def _best_image_url(images: list[dict[str, Any]]) -> str | None:
    """Return the URL of the largest image (by width * height)."""
    if not images:
        return None
    best_image = max(
        images,
        key=lambda img: (img.get("width") or 0) * (img.get("height") or 0)
    )
    return best_image.get("url")
