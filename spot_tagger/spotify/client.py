"""
Async metadata client for the Spotify Web API.

MetadataClient wraps an authenticated spotipy.Spotify session and exposes
the handful of catalog calls spot-tagger needs as coroutines. Each call is
one request/response cycle run in a worker thread, so awaiting callers
never block the event loop and never have more than one request in flight
unless they start one themselves.

Market:
    The market (ISO country code) is fixed at construction and applied to
    every track, album, playlist and search request. Artist lookups take
    no market. Artist album listings receive it as 'country'.

Errors:
    Every spotipy or transport failure is translated into
    RemoteServiceError. Nothing is retried here.

Usage:
    client = MetadataClient(create_spotify_session(config.spotify), market="US")

    item = await client.resolve(parse_uri("spotify:album:4aawyAB9vmqN3uQ7FjRGTy"))
    hits = await client.search("daft punk one more time")
"""

import asyncio
from typing import Any, Callable

import requests
import spotipy
from spotipy.oauth2 import SpotifyOauthError

from spot_tagger.core.exceptions import RemoteServiceError
from spot_tagger.core.logger import get_logger
from spot_tagger.spotify.models import (
    ResolvedAlbum,
    ResolvedArtist,
    ResolvedItem,
    ResolvedOther,
    ResolvedPlaylist,
    ResolvedTrack,
    TrackRecord,
)
from spot_tagger.spotify.uri import CanonicalReference, ReferenceKind

logger = get_logger(__name__)


# Page sizes (Spotify API maximums for each endpoint)
ALBUM_TRACKS_PAGE_SIZE = 50
ARTIST_ALBUMS_PAGE_SIZE = 50
PLAYLIST_ITEMS_PAGE_SIZE = 100
SEARCH_LIMIT = 50


class MetadataClient:
    """
    Coroutine facade over spotipy for catalog lookups.

    Attributes:
        _spotify: The underlying spotipy.Spotify session (injected).
        _market: ISO 3166-1 alpha-2 market or None.

    Example:
        client = MetadataClient(spotify, market="DE")
        album = await client.album("4aawyAB9vmqN3uQ7FjRGTy")
        page = await client.album_tracks(album["id"])
        while page is not None:
            ...
            page = await client.next_page(page)
    """

    def __init__(self, spotify: spotipy.Spotify, market: str | None = None) -> None:
        self._spotify = spotify
        self._market = market

    @property
    def market(self) -> str | None:
        return self._market

    # =========================================================================
    # Resolution
    # =========================================================================

    async def resolve(self, reference: CanonicalReference) -> ResolvedItem:
        """
        Fetch the catalog object a reference points at.

        Args:
            reference: A parsed reference from parse_uri().

        Returns:
            ResolvedTrack, ResolvedPlaylist, ResolvedAlbum or ResolvedArtist
            with the full API payload; ResolvedOther carrying the original input for unsupported kinds.
            Playlists and albums carry only the first page of their items.

        Raises:
            RemoteServiceError: On any remote failure.

        Note:
            OTHER references never touch the network.
        """
        kind = reference.kind

        if kind is ReferenceKind.TRACK:
            return ResolvedTrack(await self.track(reference.id))
        if kind is ReferenceKind.PLAYLIST:
            return ResolvedPlaylist(await self.playlist(reference.id))
        if kind is ReferenceKind.ALBUM:
            return ResolvedAlbum(await self.album(reference.id))
        if kind is ReferenceKind.ARTIST:
            return ResolvedArtist(await self.artist(reference.id))

        logger.debug(f"Not resolving unsupported reference: {reference.uri}")
        return ResolvedOther(reference.original)

    # =========================================================================
    # Single Object Operations
    # =========================================================================

    async def track(self, track_id: str) -> dict[str, Any]:
        """Get a full track object."""
        return await self._call(
            "track",
            {"track_id": track_id},
            self._spotify.track,
            track_id,
            market=self._market
        )

    async def album(self, album_id: str) -> dict[str, Any]:
        """Get a full album object (first page of tracks embedded)."""
        return await self._call(
            "album",
            {"album_id": album_id},
            self._spotify.album,
            album_id,
            market=self._market
        )

    async def playlist(self, playlist_id: str) -> dict[str, Any]:
        """Get a full playlist object (first page of items embedded)."""
        return await self._call(
            "playlist",
            {"playlist_id": playlist_id},
            self._spotify.playlist,
            playlist_id,
            market=self._market,
            additional_types=("track", "episode")
        )

    async def artist(self, artist_id: str) -> dict[str, Any]:
        """Get a full artist object. Artists have no market."""
        return await self._call(
            "artist",
            {"artist_id": artist_id},
            self._spotify.artist,
            artist_id
        )

    # =========================================================================
    # Paging Operations
    # =========================================================================

    async def album_tracks(self, album_id: str, offset: int = 0) -> dict[str, Any]:
        """
        Get one page of an album's (simplified) tracks.

        Returns:
            Paging object with 'items' and 'next'.
        """
        return await self._call(
            "album tracks",
            {"album_id": album_id, "offset": offset},
            self._spotify.album_tracks,
            album_id,
            limit=ALBUM_TRACKS_PAGE_SIZE,
            offset=offset,
            market=self._market
        )

    async def artist_albums(self, artist_id: str, offset: int = 0) -> dict[str, Any]:
        """
        Get one page of an artist's albums.

        No album-type filter is applied: albums, singles, compilations and
        appearances are all listed, in the order the service returns them.
        """
        return await self._call(
            "artist albums",
            {"artist_id": artist_id, "offset": offset},
            self._spotify.artist_albums,
            artist_id,
            country=self._market,
            limit=ARTIST_ALBUMS_PAGE_SIZE,
            offset=offset
        )

    async def playlist_items(self, playlist_id: str, offset: int = 0) -> dict[str, Any]:
        """Get one page of a playlist's items (tracks and episodes)."""
        return await self._call(
            "playlist items",
            {"playlist_id": playlist_id, "offset": offset},
            self._spotify.playlist_items,
            playlist_id,
            limit=PLAYLIST_ITEMS_PAGE_SIZE,
            offset=offset,
            market=self._market,
            additional_types=("track", "episode")
        )

    async def next_page(self, page: dict[str, Any]) -> dict[str, Any] | None:
        """
        Follow a paging object's 'next' cursor.

        Returns:
            The next page, or None when the given page is the last one.
        """
        next_url = page.get("next")
        if not next_url:
            return None
        return await self._call(
            "next page",
            {"url": next_url},
            self._spotify.next,
            page
        )

    # =========================================================================
    # Search
    # =========================================================================

    async def search(self, query: str) -> list[TrackRecord]:
        """
        Search the catalog for tracks.

        Issues one request: type=track, include_external=audio,
        limit 50, offset 0, market applied.

        Args:
            query: Free-text search query.

        Returns:
            Matching tracks in relevance order; [] if the response carries
            no track results.

        Raises:
            RemoteServiceError: On any remote failure.
        """
        # spotipy.search() has no include_external parameter. Spotify._get is
        # private but stable across spotipy 2.x; setup.py caps spotipy below 3.
        response = await self._call(
            "search",
            {"query": query},
            self._spotify._get,
            "search",
            q=query,
            type="track",
            include_external="audio",
            limit=SEARCH_LIMIT,
            offset=0,
            market=self._market
        )

        tracks_page = response.get("tracks")
        if not tracks_page:
            return []

        return [
            TrackRecord.from_spotify_api(item)
            for item in tracks_page.get("items", [])
            if item
        ]

    # =========================================================================
    # Internals
    # =========================================================================

    async def _call(
        self,
        what: str,
        details: dict[str, Any],
        func: Callable[..., Any],
        *args: Any,
        **kwargs: Any
    ) -> dict[str, Any]:
        """
        Run one blocking spotipy call in a worker thread.

        Raises:
            RemoteServiceError: With is_rate_limit set on 429 and
                is_auth_error set on 401 or token failures.
        """
        logger.debug(f"Spotify request: {what} {details}")

        try:
            result = await asyncio.to_thread(func, *args, **kwargs)
        except spotipy.SpotifyException as e:
            if e.http_status == 429:
                raise RemoteServiceError(
                    f"Rate limited while fetching {what}",
                    details={**details, "http_status": 429},
                    is_rate_limit=True
                ) from e
            if e.http_status == 401:
                raise RemoteServiceError(
                    f"Authentication rejected while fetching {what}",
                    details={**details, "http_status": 401},
                    is_auth_error=True
                ) from e
            raise RemoteServiceError(
                f"Failed to fetch {what}: {e.msg}",
                details={**details, "http_status": e.http_status, "original_error": str(e)}
            ) from e
        except SpotifyOauthError as e:
            raise RemoteServiceError(
                f"Spotify authentication failed: {e}",
                details={**details, "original_error": str(e)},
                is_auth_error=True
            ) from e
        except requests.RequestException as e:
            raise RemoteServiceError(
                f"Network error while fetching {what}: {e}",
                details={**details, "original_error": str(e)}
            ) from e

        if result is None:
            raise RemoteServiceError(
                f"Empty response while fetching {what}",
                details=details
            )

        return result
