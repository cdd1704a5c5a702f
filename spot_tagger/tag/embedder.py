"""
Metadata embedding for spot-tagger.

MetadataEmbedder maps a TrackRecord onto whichever TagWriter the file
needs and saves it:

    TrackRecord field  -> Tag
    -----------------   ---
    name               -> Field.TITLE
    artists            -> Field.ARTIST (joined with the separator)
    album              -> Field.ALBUM
    album_artists      -> Field.ALBUM_ARTIST (joined with the separator)
    track_number       -> Field.TRACK_NUMBER
    disc_number        -> Field.DISC_NUMBER
    genres             -> Field.GENRE (joined with the separator)
    label              -> Field.LABEL
    release_date       -> release date (skipped if Spotify's value is invalid)
    spotify_id         -> unique file identifier
    cover_url          -> front cover (downloaded with requests)

Error Handling:
    - Cover download failures are logged and tagging continues
    - An unusable release date is logged and skipped
    - File open/write failures raise TagEncodingError

Usage:
    embedder = MetadataEmbedder(separator=", ")
    embedder.embed_metadata(Path("song.mp3"), record)
"""

from pathlib import Path

import requests

from spot_tagger.core.exceptions import TagEncodingError
from spot_tagger.core.logger import get_logger
from spot_tagger.spotify.models import TrackRecord
from spot_tagger.tag import AudioFormat, Field, TagWriter, open_tag_writer

logger = get_logger(__name__)


# Seconds before a cover download is abandoned
COVER_TIMEOUT = 10


class MetadataEmbedder:
    """
    Writes TrackRecord metadata into audio files.

    Attributes:
        separator: Join string for artists, album artists and genres.
        id3_v24: Write ID3v2.4 for MP3 files.
        embed_cover: Download and embed album art.
        session: requests session used for cover downloads.

    Thread Safety:
        Each embed_metadata() call operates on a separate file. Calls for
        the same file must be serialized by the caller.
    """

    def __init__(
        self,
        separator: str = "",
        id3_v24: bool = False,
        embed_cover: bool = True,
        session: requests.Session | None = None
    ) -> None:
        self.separator = separator
        self.id3_v24 = id3_v24
        self.embed_cover = embed_cover
        self.session = session or requests.Session()

    def embed_metadata(
        self,
        file_path: Path,
        track: TrackRecord,
        audio_format: AudioFormat | None = None
    ) -> TagWriter:
        """
        Embed all available metadata into an audio file.

        Args:
            file_path: MP3 or Ogg Vorbis file to update.
            track: Metadata to write.
            audio_format: Container of the file; inferred from the
                          extension when None.

        Returns:
            The saved TagWriter.

        Raises:
            UnsupportedFormatError: If the container cannot be tagged.
            TagEncodingError: If the file cannot be opened or saved.
        """
        writer = open_tag_writer(file_path, audio_format, id3_v24=self.id3_v24)
        writer.set_separator(self.separator)

        self._embed_basic_tags(writer, track)
        self._embed_release_date(writer, track)

        if track.spotify_id:
            writer.add_unique_file_identifier(track.spotify_id)

        if self.embed_cover and track.cover_url:
            self._embed_cover_art(writer, track.cover_url)

        writer.save()
        logger.info(f"Tagged: {Path(file_path).name} <- {track.artist} - {track.name}")
        return writer

    def _embed_basic_tags(self, writer: TagWriter, track: TrackRecord) -> None:
        writer.set_field(Field.TITLE, [track.name])
        if track.artists:
            writer.set_field(Field.ARTIST, track.artists)
        if track.album:
            writer.set_field(Field.ALBUM, [track.album])
        if track.album_artists:
            writer.set_field(Field.ALBUM_ARTIST, track.album_artists)
        writer.set_field(Field.TRACK_NUMBER, [str(track.track_number)])
        writer.set_field(Field.DISC_NUMBER, [str(track.disc_number)])
        if track.genres:
            writer.set_field(Field.GENRE, track.genres)
        if track.label:
            writer.set_field(Field.LABEL, [track.label])

    def _embed_release_date(self, writer: TagWriter, track: TrackRecord) -> None:
        if not track.release_date:
            return
        try:
            writer.set_release_date(track.release_date)
        except TagEncodingError as e:
            logger.warning(f"Skipping release date for {track.uri}: {e.message}")

    def _embed_cover_art(self, writer: TagWriter, cover_url: str) -> None:
        cover = self._download_cover(cover_url)
        if cover is None:
            return
        mime, data = cover
        writer.add_cover(mime, data)

    def _download_cover(self, url: str) -> tuple[str, bytes] | None:
        """
        Download cover art.

        Returns:
            (mime type, image bytes), or None if the download failed.
        """
        try:
            response = self.session.get(url, timeout=COVER_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Cover download failed, continuing without cover: {url} ({e})")
            return None

        data = response.content
        if not data:
            logger.warning(f"Cover download returned no data: {url}")
            return None

        content_type = response.headers.get("Content-Type", "").split(";")[0].strip()
        mime = content_type if content_type.startswith("image/") else _detect_image_mime(data)
        return mime, data


def _detect_image_mime(data: bytes) -> str:
    """Guess the image MIME type from magic bytes (JPEG unless PNG)."""
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    return "image/jpeg"


def embed_track_metadata(
    file_path: Path,
    track: TrackRecord,
    separator: str = "",
    id3_v24: bool = False,
    embed_cover: bool = True
) -> TagWriter:
    """
    Convenience function to embed metadata without creating an embedder.

    Example:
        embed_track_metadata(Path("song.ogg"), record, separator="; ")
    """
    embedder = MetadataEmbedder(
        separator=separator,
        id3_v24=id3_v24,
        embed_cover=embed_cover
    )
    return embedder.embed_metadata(Path(file_path), track)
