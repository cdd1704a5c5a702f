"""
Common tag writer machinery.

TagWriter implements the parts of tagging that do not depend on the
container: joining multi-valued fields, validating release dates,
tracking the Opened -> Mutated -> Saved lifecycle, and committing the
result atomically (write a temporary copy, then rename it over the
original). Encoders only supply the key map and the primitive writes.

Lifecycle:
    Opened   -> any setter  -> Mutated
    Mutated  -> any setter  -> Mutated (re-setting a key overwrites)
    Mutated  -> save()      -> Saved
    Saved    -> save()      -> Saved (no-op, logged)
    Saved    -> any setter  -> TagEncodingError
"""

import os
import re
import shutil
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Iterable

from mutagen import MutagenError

from spot_tagger.core.exceptions import TagEncodingError, UnsupportedFormatError
from spot_tagger.core.logger import get_logger

logger = get_logger(__name__)


# ID3v2.4 timestamp: yyyy[-MM[-dd[THH[:mm[:ss]]]]]
_TIMESTAMP_PATTERN = re.compile(
    r"^(\d{4})(?:-(\d{2})(?:-(\d{2})(?:T(\d{2})(?::(\d{2})(?::(\d{2}))?)?)?)?)?$"
)


class Field(Enum):
    """Canonical metadata fields every encoder knows how to store."""
    TITLE = "title"
    ARTIST = "artist"
    ALBUM = "album"
    TRACK_NUMBER = "track_number"
    DISC_NUMBER = "disc_number"
    ALBUM_ARTIST = "album_artist"
    GENRE = "genre"
    LABEL = "label"


class AudioFormat(Enum):
    """Audio containers the tool can encounter. Only MP3 and OGG are taggable."""
    MP3 = "mp3"
    OGG = "ogg"
    FLAC = "flac"
    M4A = "m4a"
    AAC = "aac"
    WAV = "wav"

    @property
    def is_taggable(self) -> bool:
        return self in (AudioFormat.MP3, AudioFormat.OGG)

    @classmethod
    def from_path(cls, path: Path | str) -> "AudioFormat":
        """
        Infer the container from the file extension.

        Raises:
            UnsupportedFormatError: If the extension is not recognized.
        """
        suffix = Path(path).suffix.lower().lstrip(".")
        fmt = _SUFFIX_FORMATS.get(suffix)
        if fmt is None:
            raise UnsupportedFormatError(
                f"Unrecognized audio file extension: .{suffix}",
                details={"file_path": str(path)}
            )
        return fmt


_SUFFIX_FORMATS = {
    "mp3": AudioFormat.MP3,
    "ogg": AudioFormat.OGG,
    "oga": AudioFormat.OGG,
    "flac": AudioFormat.FLAC,
    "m4a": AudioFormat.M4A,
    "mp4": AudioFormat.M4A,
    "aac": AudioFormat.AAC,
    "wav": AudioFormat.WAV,
}


class TagState(Enum):
    OPENED = "opened"
    MUTATED = "mutated"
    SAVED = "saved"


def parse_timestamp(value: str) -> str:
    """
    Validate an ID3-style timestamp.

    Accepts "2024", "2024-01", "2024-01-15", "2024-01-15T20",
    "2024-01-15T20:30" and "2024-01-15T20:30:59".

    Returns:
        The timestamp, stripped of surrounding whitespace.

    Raises:
        TagEncodingError: If the shape is wrong or a component is out of
            range (month 13, February 30th, year 0000).
    """
    text = value.strip() if isinstance(value, str) else ""
    match = _TIMESTAMP_PATTERN.match(text)
    if match is None:
        raise TagEncodingError(
            f"Invalid release date: {value!r}",
            details={"value": value}
        )

    year, month, day, hour, minute, second = (
        int(part) if part is not None else None for part in match.groups()
    )
    try:
        datetime(
            year,
            month or 1,
            day or 1,
            hour or 0,
            minute or 0,
            second or 0
        )
    except ValueError as e:
        raise TagEncodingError(
            f"Invalid release date: {value!r} ({e})",
            details={"value": value, "original_error": str(e)}
        ) from e

    return text


class TagWriter(ABC):
    """
    A tag structure bound to one audio file.

    Subclasses set FIELD_KEYS and implement the primitive writes. All
    mutations stay in memory until save().

    Attributes:
        path: The audio file this writer owns.
        separator: Join string for multi-valued inputs. Default "".
    """

    FIELD_KEYS: dict[Field, str] = {}

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.separator = ""
        self._state = TagState.OPENED

    @property
    def state(self) -> TagState:
        return self._state

    # =========================================================================
    # Public API
    # =========================================================================

    def set_separator(self, separator: str) -> None:
        """Set the join string used by set_field() and set_raw()."""
        self.separator = separator

    def set_field(self, field: Field, values: Iterable[str] | str) -> None:
        """Store joined values under the encoder's key for a canonical field."""
        self._begin_mutation()
        self._set_text(self.FIELD_KEYS[field], self._join(values))

    def set_raw(self, key: str, values: Iterable[str] | str) -> None:
        """Store joined values under a caller-supplied native key."""
        self._begin_mutation()
        self._set_raw_text(key, self._join(values))

    def set_release_date(self, date: str) -> None:
        """
        Store the release date.

        Raises:
            TagEncodingError: If date is not a valid ID3 timestamp.
        """
        timestamp = parse_timestamp(date)
        self._begin_mutation()
        self._set_release_date(timestamp)

    def add_cover(self, mime: str, data: bytes) -> None:
        """Embed a front cover image, replacing any existing one."""
        self._begin_mutation()
        self._add_cover(mime, data)

    def add_unique_file_identifier(self, track_id: str) -> None:
        """Record the Spotify track id the file was tagged from."""
        self._begin_mutation()
        self._add_unique_file_identifier(track_id)

    def save(self) -> None:
        """
        Commit tags to disk.

        The file is written through a temporary copy in the same directory
        and renamed over the original, so a failure leaves the original
        untouched. Saving an already saved writer does nothing.

        Raises:
            TagEncodingError: If the file cannot be written.
        """
        if self._state is TagState.SAVED:
            logger.debug(f"Tags already saved, skipping: {self.path}")
            return

        temp_path: Path | None = None
        try:
            fd, temp_name = tempfile.mkstemp(
                prefix=f".{self.path.stem}.",
                suffix=f"{self.path.suffix}.tmp",
                dir=self.path.parent
            )
            os.close(fd)
            temp_path = Path(temp_name)

            shutil.copy2(self.path, temp_path)
            self._write(temp_path)
            os.replace(temp_path, self.path)
        except (OSError, MutagenError) as e:
            raise TagEncodingError(
                f"Failed to save tags: {self.path.name} ({e})",
                details={"file_path": str(self.path), "original_error": str(e)}
            ) from e
        finally:
            if temp_path is not None and temp_path.exists():
                temp_path.unlink()

        self._state = TagState.SAVED
        logger.debug(f"Tags saved: {self.path}")

    # =========================================================================
    # Encoder Primitives
    # =========================================================================

    @abstractmethod
    def _set_text(self, key: str, text: str) -> None:
        """Store text under a native key known to the encoder."""

    def _set_raw_text(self, key: str, text: str) -> None:
        self._set_text(key, text)

    @abstractmethod
    def _set_release_date(self, timestamp: str) -> None:
        """Store a validated timestamp."""

    @abstractmethod
    def _add_cover(self, mime: str, data: bytes) -> None:
        """Replace any front cover with the given image."""

    @abstractmethod
    def _add_unique_file_identifier(self, track_id: str) -> None:
        """Store the Spotify track id."""

    @abstractmethod
    def _write(self, target: Path) -> None:
        """Write the in-memory tags into target (a copy of self.path)."""

    # =========================================================================
    # Internals
    # =========================================================================

    def _join(self, values: Iterable[str] | str) -> str:
        if isinstance(values, str):
            return values
        return self.separator.join(str(value) for value in values)

    def _begin_mutation(self) -> None:
        if self._state is TagState.SAVED:
            raise TagEncodingError(
                f"Tags for {self.path.name} were already saved; open a new writer",
                details={"file_path": str(self.path)}
            )
        self._state = TagState.MUTATED
