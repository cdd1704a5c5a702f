"""
Catalog expansion: playlists, albums and artists to flat track lists.

CatalogExpander turns a composite catalog object into the ordered list of
TrackRecords it contains:

    Playlist -> its track items, in playlist order (episodes and removed
                tracks dropped). First page only unless paginate_playlists.
    Album    -> every track across all pages, in album order.
    Artist   -> every album the artist is listed on, in listing order,
                each expanded like an album and appended. No deduplication.

Paging is strictly sequential: one request in flight at a time. Results
are accumulated locally and returned only when every page succeeded; a
failing page raises and the partial list is discarded.

Usage:
    expander = CatalogExpander(client)
    tracks = await expander.expand(parse_uri(url))
"""

from typing import Any

from tqdm import tqdm

from spot_tagger.core.exceptions import InvalidReferenceError
from spot_tagger.core.logger import get_logger
from spot_tagger.spotify.client import MetadataClient
from spot_tagger.spotify.models import TrackRecord
from spot_tagger.spotify.uri import CanonicalReference, ReferenceKind

logger = get_logger(__name__)


class CatalogExpander:
    """
    Expands composite references into TrackRecords.

    Attributes:
        _client: MetadataClient used for every request.
        _paginate_playlists: Follow playlist pages past the first.
        _show_progress: Show a tqdm bar while expanding artist albums.
    """

    def __init__(
        self,
        client: MetadataClient,
        paginate_playlists: bool = False,
        show_progress: bool = False
    ) -> None:
        self._client = client
        self._paginate_playlists = paginate_playlists
        self._show_progress = show_progress

    async def expand(self, reference: CanonicalReference) -> list[TrackRecord]:
        """
        Expand any supported reference into track records.

        A track reference yields a single record.

        Raises:
            InvalidReferenceError: For OTHER references.
            RemoteServiceError: If any request fails.
        """
        kind = reference.kind

        if kind is ReferenceKind.TRACK:
            return [TrackRecord.from_spotify_api(await self._client.track(reference.id))]
        if kind is ReferenceKind.PLAYLIST:
            return await self.expand_playlist(reference.id)
        if kind is ReferenceKind.ALBUM:
            return await self.expand_album(reference.id)
        if kind is ReferenceKind.ARTIST:
            return await self.expand_artist(reference.id)

        raise InvalidReferenceError(
            f"Cannot expand unsupported reference: {reference.uri}",
            details={"reference": reference.original}
        )

    async def expand_playlist(self, playlist_id: str) -> list[TrackRecord]:
        """
        Expand a playlist into its tracks, in playlist order.

        Empty slots (removed or unavailable tracks) and non-track items
        such as podcast episodes are dropped.

        Args:
            playlist_id: Spotify playlist ID.

        Returns:
            Track records from the first page of items, or from every page
            when the expander was built with paginate_playlists=True.
        """
        records: list[TrackRecord] = []
        skipped = 0

        page: dict[str, Any] | None = await self._client.playlist_items(playlist_id)
        while page is not None:
            for item in page.get("items", []):
                if not self._is_track_item(item):
                    skipped += 1
                    continue
                records.append(TrackRecord.from_spotify_api(item["track"]))

            if not self._paginate_playlists:
                if page.get("next"):
                    logger.debug(
                        f"Playlist {playlist_id}: stopping after first page "
                        f"({page.get('total', '?')} items total)"
                    )
                break
            page = await self._client.next_page(page)

        if skipped > 0:
            logger.debug(f"Playlist {playlist_id}: skipped {skipped} non-track items")

        logger.info(f"Playlist {playlist_id}: {len(records)} tracks")
        return records

    async def expand_album(self, album_id: str) -> list[TrackRecord]:
        """
        Expand an album into all of its tracks, in album order.

        The album object is fetched once so every record carries album
        name, album artists, release date, cover and label. Track pages are
        then followed until the service reports no further page.
        """
        album = await self._client.album(album_id)

        records: list[TrackRecord] = []
        page: dict[str, Any] | None = await self._client.album_tracks(album_id)
        while page is not None:
            for item in page.get("items", []):
                if item:
                    records.append(TrackRecord.from_spotify_api(item, album_data=album))
            page = await self._client.next_page(page)

        logger.debug(f"Album {album.get('name', album_id)}: {len(records)} tracks")
        return records

    async def expand_artist(self, artist_id: str) -> list[TrackRecord]:
        """
        Expand an artist into the tracks of every album they are listed on.

        Albums are collected across all listing pages first, then expanded
        one after another in listing order. Tracks that appear on several
        albums appear several times.
        """
        album_ids: list[str] = []
        page: dict[str, Any] | None = await self._client.artist_albums(artist_id)
        while page is not None:
            for album in page.get("items", []):
                if album and album.get("id"):
                    album_ids.append(album["id"])
            page = await self._client.next_page(page)

        logger.info(f"Artist {artist_id}: {len(album_ids)} albums")

        records: list[TrackRecord] = []
        for album_id in tqdm(
            album_ids,
            desc="Expanding albums",
            unit="album",
            disable=not self._show_progress
        ):
            records.extend(await self.expand_album(album_id))

        logger.info(f"Artist {artist_id}: {len(records)} tracks")
        return records

    @staticmethod
    def _is_track_item(item: dict[str, Any] | None) -> bool:
        """A playlist item is kept only if it holds a track (not an episode)."""
        if not item:
            return False
        track = item.get("track")
        if not track:
            return False
        return track.get("type", "track") == "track"
