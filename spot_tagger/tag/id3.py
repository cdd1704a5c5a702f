"""
ID3v2 tag writer for MP3 files.

Field Mapping:
    Field          -> ID3 frame
    ------------   ---------
    TITLE          -> TIT2
    ARTIST         -> TPE1
    ALBUM          -> TALB
    TRACK_NUMBER   -> TRCK
    DISC_NUMBER    -> TPOS
    GENRE          -> TCON
    LABEL          -> TPUB
    ALBUM_ARTIST   -> TPE2
    release date   -> TDRL
    cover          -> APIC (front cover, description "cover")
    track id       -> UFID (owner "spotify.com")

Raw keys that name a known text frame (e.g. "TCOM") are written as that
frame; any other key becomes a TXXX frame with the key as description.

Tags are written as ID3v2.3 unless the writer is switched to v2.4.
A v2.3 save converts existing v2.4 frames (TDRC to TYER/TDAT) but keeps
TDRL.
"""

from pathlib import Path

from mutagen import MutagenError
from mutagen.id3 import (
    APIC,
    ID3,
    TDRL,
    TXXX,
    UFID,
    Frames,
    ID3NoHeaderError,
    PictureType,
    TextFrame,
)

from spot_tagger.core.exceptions import TagEncodingError
from spot_tagger.core.logger import get_logger
from spot_tagger.tag.base import Field, TagWriter

logger = get_logger(__name__)


# ID3 text encoding 3 = UTF-8 (mutagen downgrades to UTF-16 for v2.3)
UTF8 = 3

UFID_OWNER = "spotify.com"
COVER_DESCRIPTION = "cover"


class Id3TagWriter(TagWriter):
    """
    TagWriter backed by a mutagen ID3 tag.

    A file without an ID3 header starts from an empty tag.

    Example:
        writer = Id3TagWriter(Path("song.mp3"))
        writer.set_separator("; ")
        writer.set_field(Field.ARTIST, ["Foo", "Bar"])
        writer.save()
    """

    FIELD_KEYS = {
        Field.TITLE: "TIT2",
        Field.ARTIST: "TPE1",
        Field.ALBUM: "TALB",
        Field.TRACK_NUMBER: "TRCK",
        Field.DISC_NUMBER: "TPOS",
        Field.GENRE: "TCON",
        Field.LABEL: "TPUB",
        Field.ALBUM_ARTIST: "TPE2",
    }

    def __init__(self, path: Path, id3_v24: bool = False) -> None:
        super().__init__(path)
        self.v2_version = 4 if id3_v24 else 3

        try:
            self._tags = ID3(self.path)
        except ID3NoHeaderError:
            logger.debug(f"No ID3 header, starting empty tag: {self.path}")
            self._tags = ID3()
        except (OSError, MutagenError) as e:
            raise TagEncodingError(
                f"Cannot read ID3 tags: {self.path.name} ({e})",
                details={"file_path": str(self.path), "original_error": str(e)}
            ) from e

    def use_id3_v24(self, enabled: bool = True) -> None:
        """Switch the version written by save() between v2.3 and v2.4."""
        self.v2_version = 4 if enabled else 3

    @property
    def tags(self) -> ID3:
        return self._tags

    def _set_text(self, key: str, text: str) -> None:
        frame_class = Frames[key]
        self._tags.setall(key, [frame_class(encoding=UTF8, text=[text])])

    def _set_raw_text(self, key: str, text: str) -> None:
        frame_class = Frames.get(key)
        if frame_class is not None and issubclass(frame_class, TextFrame) and frame_class is not TXXX:
            self._set_text(key, text)
            return

        frame = TXXX(encoding=UTF8, desc=key, text=[text])
        self._tags.setall(frame.HashKey, [frame])

    def _set_release_date(self, timestamp: str) -> None:
        self._tags.setall("TDRL", [TDRL(encoding=UTF8, text=[timestamp])])

    def _add_cover(self, mime: str, data: bytes) -> None:
        self._tags.delall("APIC")
        self._tags.add(
            APIC(
                encoding=UTF8,
                mime=mime,
                type=PictureType.COVER_FRONT,
                desc=COVER_DESCRIPTION,
                data=data
            )
        )

    def _add_unique_file_identifier(self, track_id: str) -> None:
        frame = UFID(owner=UFID_OWNER, data=track_id.encode("utf-8"))
        self._tags.setall(frame.HashKey, [frame])

    def _write(self, target: Path) -> None:
        if self.v2_version == 3:
            self._convert_to_v23()
        self._tags.save(target, v2_version=self.v2_version)

    def _convert_to_v23(self) -> None:
        """
        Downgrade v2.4-only frames before a v2.3 save.

        TDRC becomes TYER/TDAT/TIME. TDRL is set aside and restored
        afterwards since it is the only place the release date is stored.
        """
        release_dates = self._tags.getall("TDRL")
        self._tags.update_to_v23()
        if release_dates:
            self._tags.setall("TDRL", release_dates)
