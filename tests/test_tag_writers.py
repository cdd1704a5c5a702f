"""Test ID3 and Vorbis tag writers"""

import base64
import shutil

import pytest
from mutagen.flac import Picture
from mutagen.id3 import ID3, TDRC
from mutagen.oggvorbis import OggVorbis

from spot_tagger.core.exceptions import TagEncodingError, UnsupportedFormatError
from spot_tagger.tag import (
    AudioFormat,
    Field,
    Id3TagWriter,
    OggTagWriter,
    TagState,
    open_tag_writer,
    parse_timestamp,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class TestOpenTagWriter:
    """Test format dispatch"""

    def test_mp3(self, mp3_file):
        """MP3 opens an ID3 writer"""
        assert isinstance(open_tag_writer(mp3_file, AudioFormat.MP3), Id3TagWriter)

    def test_ogg_inferred(self, ogg_file):
        """Extension inference picks the Vorbis writer"""
        assert isinstance(open_tag_writer(ogg_file), OggTagWriter)

    @pytest.mark.parametrize("audio_format", [AudioFormat.FLAC, AudioFormat.M4A, AudioFormat.WAV])
    def test_unsupported_raises_before_open(self, temp_dir, audio_format):
        """Unsupported containers fail without touching the file"""
        missing = temp_dir / "does_not_exist.bin"

        with pytest.raises(UnsupportedFormatError):
            open_tag_writer(missing, audio_format)

    def test_unknown_extension(self, temp_dir):
        """Unknown extensions cannot be inferred"""
        with pytest.raises(UnsupportedFormatError):
            open_tag_writer(temp_dir / "notes.txt")


class TestParseTimestamp:
    """Test release date validation"""

    @pytest.mark.parametrize("value", [
        "2024", "2024-01", "2024-01-15", "2024-01-15T20", "2024-01-15T20:30", "2024-02-29T23:59:59",
    ])
    def test_valid(self, value):
        assert parse_timestamp(value) == value

    @pytest.mark.parametrize("value", [
        "", "24", "2024-13", "2023-02-29", "2024/01/01", "2024-01-15 20:30", "0000", "Jan 2024",
    ])
    def test_invalid(self, value):
        with pytest.raises(TagEncodingError):
            parse_timestamp(value)


class TestId3TagWriter:
    """Test ID3v2 encoding"""

    def test_joined_title_round_trip(self, mp3_file):
        """Values are joined with the separator; TDRL survives a v2.3 save"""
        writer = open_tag_writer(mp3_file, AudioFormat.MP3)
        writer.set_separator("; ")
        writer.set_field(Field.TITLE, ["Foo", "Bar"])
        writer.set_release_date("2024-01-01")
        writer.save()

        tags = ID3(mp3_file)
        assert tags["TIT2"].text == ["Foo; Bar"]
        assert str(tags["TDRL"].text[0]) == "2024-01-01"
        assert tags.version == (2, 3, 0)

    def test_v24(self, mp3_file):
        """id3_v24 writes an ID3v2.4 header"""
        writer = Id3TagWriter(mp3_file, id3_v24=True)
        writer.set_field(Field.ALBUM, "Discovery")
        writer.save()

        assert ID3(mp3_file).version == (2, 4, 0)

    def test_use_id3_v24_toggle(self, mp3_file):
        """The version can be switched after opening"""
        writer = Id3TagWriter(mp3_file)
        writer.use_id3_v24()
        writer.set_field(Field.ALBUM, "Discovery")
        writer.save()

        assert ID3(mp3_file).version == (2, 4, 0)

    def test_field_frames(self, mp3_file):
        """Canonical fields land in their ID3 frames"""
        writer = Id3TagWriter(mp3_file)
        writer.set_separator(", ")
        writer.set_field(Field.ARTIST, ["Daft Punk", "Romanthony"])
        writer.set_field(Field.TRACK_NUMBER, ["1"])
        writer.set_field(Field.DISC_NUMBER, ["2"])
        writer.set_field(Field.LABEL, ["Virgin"])
        writer.set_field(Field.ALBUM_ARTIST, ["Daft Punk"])
        writer.set_field(Field.GENRE, ["french house", "disco"])
        writer.save()

        tags = ID3(mp3_file)
        assert tags["TPE1"].text == ["Daft Punk, Romanthony"]
        assert tags["TRCK"].text == ["1"]
        assert tags["TPOS"].text == ["2"]
        assert tags["TPUB"].text == ["Virgin"]
        assert tags["TPE2"].text == ["Daft Punk"]
        assert tags["TCON"].text == ["french house, disco"]

    def test_resetting_field_overwrites(self, mp3_file):
        """Setting a field twice keeps only the last value"""
        writer = Id3TagWriter(mp3_file)
        writer.set_field(Field.TITLE, "First")
        writer.set_field(Field.TITLE, "Second")
        writer.save()

        assert ID3(mp3_file).getall("TIT2")[0].text == ["Second"]

    def test_raw_keys(self, mp3_file):
        """Known text frames are written directly, others as TXXX"""
        writer = Id3TagWriter(mp3_file)
        writer.set_raw("TCOM", "Thomas Bangalter")
        writer.set_raw("MOOD", ["happy", "loud"])
        writer.save()

        tags = ID3(mp3_file)
        assert tags["TCOM"].text == ["Thomas Bangalter"]
        assert tags["TXXX:MOOD"].text == ["happyloud"]

    def test_cover_and_identifier(self, mp3_file):
        """APIC front cover and UFID owned by spotify.com"""
        writer = Id3TagWriter(mp3_file)
        writer.add_cover("image/jpeg", b"first")
        writer.add_cover("image/png", PNG_BYTES)
        writer.add_unique_file_identifier("4cOdK2wGLETKBW3PvgPWqT")
        writer.save()

        tags = ID3(mp3_file)
        covers = tags.getall("APIC")
        assert len(covers) == 1
        assert covers[0].mime == "image/png"
        assert covers[0].type == 3
        assert covers[0].desc == "cover"
        assert covers[0].data == PNG_BYTES
        assert tags["UFID:spotify.com"].data == b"4cOdK2wGLETKBW3PvgPWqT"

    def test_existing_frames_preserved(self, mp3_file):
        """Reopening keeps frames written by an earlier save"""
        first = Id3TagWriter(mp3_file)
        first.set_field(Field.TITLE, "Title")
        first.save()

        second = Id3TagWriter(mp3_file)
        second.set_field(Field.ALBUM, "Album")
        second.save()

        tags = ID3(mp3_file)
        assert tags["TIT2"].text == ["Title"]
        assert tags["TALB"].text == ["Album"]

    def test_v24_tag_downgraded_on_v23_save(self, mp3_file):
        """An existing v2.4 TDRC becomes TYER/TDAT; TDRL is kept"""
        existing = ID3()
        existing.add(TDRC(encoding=3, text=["2020-05-06"]))
        existing.save(mp3_file, v2_version=4)

        writer = open_tag_writer(mp3_file, AudioFormat.MP3)
        writer.set_field(Field.ALBUM, "Discovery")
        writer.set_release_date("2024-01-01")
        writer.save()

        raw = ID3(mp3_file, translate=False)
        assert raw.version == (2, 3, 0)
        assert "TDRC" not in raw
        assert raw["TYER"].text == ["2020"]
        assert raw["TDAT"].text == ["0605"]
        assert str(raw["TDRL"].text[0]) == "2024-01-01"
        assert raw["TALB"].text == ["Discovery"]

    def test_v24_save_keeps_tdrc(self, mp3_file):
        """No downgrade happens when writing v2.4"""
        existing = ID3()
        existing.add(TDRC(encoding=3, text=["2020-05-06"]))
        existing.save(mp3_file, v2_version=4)

        writer = Id3TagWriter(mp3_file, id3_v24=True)
        writer.set_field(Field.ALBUM, "Discovery")
        writer.save()

        raw = ID3(mp3_file, translate=False)
        assert str(raw["TDRC"].text[0]) == "2020-05-06"
        assert "TYER" not in raw


class TestOggTagWriter:
    """Test Vorbis comment encoding"""

    def test_title_round_trip(self, ogg_file):
        """Joined values are stored as one comment"""
        writer = open_tag_writer(ogg_file, AudioFormat.OGG)
        writer.set_separator("; ")
        writer.set_field(Field.TITLE, ["Foo", "Bar"])
        writer.save()

        assert OggVorbis(ogg_file).tags["TITLE"] == ["Foo; Bar"]

    def test_extended_keys(self, ogg_file):
        """Date, label, album artist and track id keys"""
        writer = OggTagWriter(ogg_file)
        writer.set_release_date("2001-03-12")
        writer.set_field(Field.LABEL, "Virgin")
        writer.set_field(Field.ALBUM_ARTIST, "Daft Punk")
        writer.add_unique_file_identifier("t1")
        writer.set_raw("COMMENT", "tagged")
        writer.save()

        tags = OggVorbis(ogg_file).tags
        assert tags["DATE"] == ["2001-03-12"]
        assert tags["LABEL"] == ["Virgin"]
        assert tags["ALBUMARTIST"] == ["Daft Punk"]
        assert tags["SPOTIFY_TRACK_ID"] == ["t1"]
        assert tags["COMMENT"] == ["tagged"]

    def test_cover_picture_block(self, ogg_file):
        """Cover is a base64 FLAC picture block"""
        writer = OggTagWriter(ogg_file)
        writer.add_cover("image/png", PNG_BYTES)
        writer.save()

        [encoded] = OggVorbis(ogg_file).tags["METADATA_BLOCK_PICTURE"]
        picture = Picture(base64.b64decode(encoded))
        assert picture.type == 3
        assert picture.mime == "image/png"
        assert picture.desc == "cover"
        assert picture.data == PNG_BYTES

    def test_invalid_key(self, ogg_file):
        """Keys containing '=' are rejected"""
        writer = OggTagWriter(ogg_file)

        with pytest.raises(TagEncodingError):
            writer.set_raw("BAD=KEY", "x")

    def test_not_an_ogg_file(self, mp3_file, temp_dir):
        """Garbage input raises TagEncodingError, not a mutagen error"""
        fake = temp_dir / "fake.ogg"
        fake.write_bytes(mp3_file.read_bytes())

        with pytest.raises(TagEncodingError):
            OggTagWriter(fake)


class TestLifecycle:
    """Test Opened -> Mutated -> Saved"""

    def test_states(self, mp3_file):
        writer = Id3TagWriter(mp3_file)
        assert writer.state is TagState.OPENED

        writer.set_field(Field.TITLE, "x")
        assert writer.state is TagState.MUTATED

        writer.save()
        assert writer.state is TagState.SAVED

    def test_invalid_date_leaves_writer_unchanged(self, mp3_file):
        """A rejected date does not mutate the tag"""
        writer = Id3TagWriter(mp3_file)

        with pytest.raises(TagEncodingError):
            writer.set_release_date("2024-13-01")

        assert writer.state is TagState.OPENED
        assert "TDRL" not in writer.tags

    def test_second_save_is_noop(self, mp3_file):
        """Saving twice does not rewrite the file"""
        writer = Id3TagWriter(mp3_file)
        writer.set_field(Field.TITLE, "x")
        writer.save()
        saved = mp3_file.read_bytes()

        writer.save()

        assert mp3_file.read_bytes() == saved
        assert writer.state is TagState.SAVED

    def test_mutation_after_save(self, ogg_file):
        """Setters on a saved writer raise"""
        writer = OggTagWriter(ogg_file)
        writer.set_field(Field.TITLE, "x")
        writer.save()

        with pytest.raises(TagEncodingError):
            writer.set_field(Field.ALBUM, "y")

    def test_failed_save_keeps_original(self, mp3_file, temp_dir, monkeypatch):
        """A failing write leaves the original bytes and no temp files"""
        original = mp3_file.read_bytes()
        writer = Id3TagWriter(mp3_file)
        writer.set_field(Field.TITLE, "x")

        def failing_write(target):
            target.write_bytes(b"partial")
            raise OSError("disk full")

        monkeypatch.setattr(writer, "_write", failing_write)

        with pytest.raises(TagEncodingError):
            writer.save()

        assert mp3_file.read_bytes() == original
        assert sorted(p.name for p in temp_dir.iterdir()) == ["song.mp3"]
        assert writer.state is TagState.MUTATED

    def test_temp_file_creation_failure(self, mp3_file, temp_dir):
        """A vanished directory surfaces as TagEncodingError, not OSError"""
        album_dir = temp_dir / "album"
        album_dir.mkdir()
        path = album_dir / "track.mp3"
        shutil.copy2(mp3_file, path)
        writer = Id3TagWriter(path)
        writer.set_field(Field.TITLE, "x")
        shutil.rmtree(album_dir)

        with pytest.raises(TagEncodingError) as exc_info:
            writer.save()

        assert exc_info.value.details["file_path"] == str(path)
        assert writer.state is TagState.MUTATED
