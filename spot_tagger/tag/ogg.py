"""
Vorbis comment writer for Ogg Vorbis files.

Field Mapping:
    Field          -> Vorbis comment
    ------------   --------------
    TITLE          -> TITLE
    ARTIST         -> ARTIST
    ALBUM          -> ALBUM
    TRACK_NUMBER   -> TRACKNUMBER
    DISC_NUMBER    -> DISCNUMBER
    GENRE          -> GENRE
    LABEL          -> LABEL
    ALBUM_ARTIST   -> ALBUMARTIST
    release date   -> DATE
    cover          -> METADATA_BLOCK_PICTURE (base64 FLAC picture block)
    track id       -> SPOTIFY_TRACK_ID
"""

import base64
from pathlib import Path

from mutagen import MutagenError
from mutagen.flac import Picture
from mutagen.id3 import PictureType
from mutagen.oggvorbis import OggVorbis

from spot_tagger.core.exceptions import TagEncodingError
from spot_tagger.tag.base import Field, TagWriter


PICTURE_KEY = "METADATA_BLOCK_PICTURE"
TRACK_ID_KEY = "SPOTIFY_TRACK_ID"
DATE_KEY = "DATE"
COVER_DESCRIPTION = "cover"


class OggTagWriter(TagWriter):
    """TagWriter backed by the Vorbis comment header of an Ogg Vorbis stream."""

    FIELD_KEYS = {
        Field.TITLE: "TITLE",
        Field.ARTIST: "ARTIST",
        Field.ALBUM: "ALBUM",
        Field.TRACK_NUMBER: "TRACKNUMBER",
        Field.DISC_NUMBER: "DISCNUMBER",
        Field.GENRE: "GENRE",
        Field.LABEL: "LABEL",
        Field.ALBUM_ARTIST: "ALBUMARTIST",
    }

    def __init__(self, path: Path) -> None:
        super().__init__(path)

        try:
            self._audio = OggVorbis(self.path)
        except (OSError, MutagenError) as e:
            raise TagEncodingError(
                f"Cannot read Ogg Vorbis file: {self.path.name} ({e})",
                details={"file_path": str(self.path), "original_error": str(e)}
            ) from e

        if self._audio.tags is None:
            self._audio.add_tags()

    @property
    def tags(self):
        return self._audio.tags

    def _set_text(self, key: str, text: str) -> None:
        try:
            self._audio.tags[key] = [text]
        except ValueError as e:
            raise TagEncodingError(
                f"Invalid Vorbis comment key: {key!r}",
                details={"file_path": str(self.path), "key": key}
            ) from e

    def _set_release_date(self, timestamp: str) -> None:
        self._set_text(DATE_KEY, timestamp)

    def _add_cover(self, mime: str, data: bytes) -> None:
        picture = Picture()
        picture.type = PictureType.COVER_FRONT
        picture.mime = mime
        picture.desc = COVER_DESCRIPTION
        picture.data = data
        encoded = base64.b64encode(picture.write()).decode("ascii")
        self._set_text(PICTURE_KEY, encoded)

    def _add_unique_file_identifier(self, track_id: str) -> None:
        self._set_text(TRACK_ID_KEY, track_id)

    def _write(self, target: Path) -> None:
        self._audio.save(target)
