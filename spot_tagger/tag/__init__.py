"""
Tag module for spot-tagger.

    - base: Field, AudioFormat and the shared TagWriter lifecycle
    - id3: ID3v2 frames for MP3
    - ogg: Vorbis comments for Ogg Vorbis
    - embedder: Apply a TrackRecord to a writer

Usage:
    from spot_tagger.tag import AudioFormat, Field, open_tag_writer

    writer = open_tag_writer(Path("song.mp3"), AudioFormat.MP3)
    writer.set_field(Field.TITLE, ["Song Title"])
    writer.save()
"""

from pathlib import Path

from spot_tagger.core.exceptions import UnsupportedFormatError
from spot_tagger.tag.base import AudioFormat, Field, TagState, TagWriter, parse_timestamp
from spot_tagger.tag.id3 import Id3TagWriter
from spot_tagger.tag.ogg import OggTagWriter


def open_tag_writer(
    path: Path | str,
    audio_format: AudioFormat | None = None,
    id3_v24: bool = False
) -> TagWriter:
    """
    Open the tag writer matching an audio container.

    Args:
        path: Existing, writable audio file.
        audio_format: Container of the file. Inferred from the extension
                      when None.
        id3_v24: For MP3, write ID3v2.4 instead of v2.3.

    Returns:
        Id3TagWriter for MP3, OggTagWriter for Ogg Vorbis.

    Raises:
        UnsupportedFormatError: For any other container. The file is not
            opened.
        TagEncodingError: If the file cannot be parsed.
    """
    path = Path(path)
    if audio_format is None:
        audio_format = AudioFormat.from_path(path)

    if audio_format is AudioFormat.MP3:
        return Id3TagWriter(path, id3_v24=id3_v24)
    if audio_format is AudioFormat.OGG:
        return OggTagWriter(path)

    raise UnsupportedFormatError(
        f"Cannot tag {audio_format.value} files (only mp3 and ogg are supported)",
        details={"file_path": str(path), "format": audio_format.value}
    )


__all__ = [
    "AudioFormat",
    "Field",
    "TagState",
    "TagWriter",
    "Id3TagWriter",
    "OggTagWriter",
    "open_tag_writer",
    "parse_timestamp",
]
