"""Test configuration and fixtures"""

import struct
import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from mutagen.ogg import OggPage

from spot_tagger.core.config import (
    CatalogConfig,
    Config,
    LoggingConfig,
    SpotifyConfig,
    TaggingConfig,
)


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def mp3_file(temp_dir):
    """MP3-looking file with no ID3 header (a few silent MPEG frame headers)"""
    path = temp_dir / "song.mp3"
    frame = b"\xff\xfb\x90\x64" + b"\x00" * 413
    path.write_bytes(frame * 4)
    return path


def _build_ogg_vorbis() -> bytes:
    """Smallest Ogg Vorbis stream mutagen will open: ident, comment+setup, one audio page"""
    ident_packet = (
        b"\x01vorbis"
        + struct.pack("<IBI3iBB", 0, 2, 44100, 0, 128000, 0, 0xB8, 1)
    )
    vendor = b"spot-tagger tests"
    comment_packet = (
        b"\x03vorbis"
        + struct.pack("<I", len(vendor)) + vendor
        + struct.pack("<I", 0)
        + b"\x01"
    )
    setup_packet = b"\x05vorbis" + b"\x00" * 16

    ident_page = OggPage()
    ident_page.serial = 1
    ident_page.sequence = 0
    ident_page.position = 0
    ident_page.first = True
    ident_page.packets = [ident_packet]

    header_page = OggPage()
    header_page.serial = 1
    header_page.sequence = 1
    header_page.position = 0
    header_page.packets = [comment_packet, setup_packet]

    audio_page = OggPage()
    audio_page.serial = 1
    audio_page.sequence = 2
    audio_page.position = 44100
    audio_page.last = True
    audio_page.packets = [b"\x00" * 64]

    return ident_page.write() + header_page.write() + audio_page.write()


@pytest.fixture
def ogg_file(temp_dir):
    """Minimal valid Ogg Vorbis file with an empty comment header"""
    path = temp_dir / "song.ogg"
    path.write_bytes(_build_ogg_vorbis())
    return path


@pytest.fixture
def app_config(temp_dir):
    """Config object as load_config() would build it"""
    return Config(
        spotify=SpotifyConfig(client_id="id", client_secret="secret", market="US"),
        catalog=CatalogConfig(paginate_playlists=False),
        tagging=TaggingConfig(separator=", ", id3_v24=False, embed_cover=False),
        logging=LoggingConfig(directory=temp_dir),
    )


@pytest.fixture
def mock_spotify():
    """spotipy.Spotify stand-in"""
    return MagicMock()
