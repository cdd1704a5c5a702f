"""Test Spotify reference parsing"""

import pytest

from spot_tagger.core.exceptions import InvalidReferenceError
from spot_tagger.spotify.uri import CanonicalReference, ReferenceKind, parse_uri


class TestNativeUris:
    """Test spotify:<kind>:<id> inputs"""

    @pytest.mark.parametrize("kind", ["track", "playlist", "album", "artist"])
    def test_supported_kinds(self, kind):
        """Each supported kind maps to its ReferenceKind"""
        reference = parse_uri(f"spotify:{kind}:abc123")

        assert reference.kind is ReferenceKind(kind)
        assert reference.id == "abc123"
        assert reference.uri == f"spotify:{kind}:abc123"

    @pytest.mark.parametrize("value", ["spotify:", "spotify:track", "spotify:abc"])
    def test_too_few_segments(self, value):
        """Native URIs need at least three segments"""
        with pytest.raises(InvalidReferenceError):
            parse_uri(value)

    def test_unknown_kind_is_other(self):
        """Unknown kinds keep the original string"""
        reference = parse_uri("spotify:show:5CfCWKI5pZ28U0uOzXkDHe")

        assert reference.kind is ReferenceKind.OTHER
        assert reference.uri == "spotify:show:5CfCWKI5pZ28U0uOzXkDHe"
        assert not reference.is_expandable

    def test_legacy_user_playlist_kept_verbatim(self):
        """Extra segments are kept; kind and id come from segments 1 and 2"""
        value = "spotify:user:someone:playlist:37i9dQZF1DXcBWIGoYBM5M"
        reference = parse_uri(value)

        assert reference.kind is ReferenceKind.OTHER
        assert reference.id == "someone"
        assert reference.uri == value

    def test_empty_id_rejected(self):
        """A supported kind with an empty id is invalid"""
        with pytest.raises(InvalidReferenceError):
            parse_uri("spotify:track:")


class TestWebUrls:
    """Test open.spotify.com inputs"""

    def test_track_url(self):
        """Web player URL becomes spotify:<kind>:<id>"""
        reference = parse_uri("https://open.spotify.com/track/4cOdK2wGLETKBW3PvgPWqT")

        assert reference == CanonicalReference(
            kind=ReferenceKind.TRACK,
            id="4cOdK2wGLETKBW3PvgPWqT",
            uri="spotify:track:4cOdK2wGLETKBW3PvgPWqT",
            original="https://open.spotify.com/track/4cOdK2wGLETKBW3PvgPWqT",
        )

    def test_query_and_fragment_ignored(self):
        """Share links carry ?si=...; it is dropped"""
        reference = parse_uri("https://open.spotify.com/album/4aawyAB9vmqN3uQ7FjRGTy?si=xyz#top")

        assert reference.kind is ReferenceKind.ALBUM
        assert reference.uri == "spotify:album:4aawyAB9vmqN3uQ7FjRGTy"

    def test_extra_path_segments(self):
        """Only the first two path segments are used"""
        reference = parse_uri("https://open.spotify.com/playlist/abc/extra/stuff")

        assert reference.uri == "spotify:playlist:abc"

    def test_localized_url(self):
        """intl-<lang> prefix is skipped"""
        reference = parse_uri("https://open.spotify.com/intl-de/artist/0OdUWJ0sBjDrqHygGUXeCF")

        assert reference.kind is ReferenceKind.ARTIST
        assert reference.id == "0OdUWJ0sBjDrqHygGUXeCF"

    def test_unknown_kind_url_is_other(self):
        """Episode links parse but are not expandable"""
        reference = parse_uri("https://open.spotify.com/episode/xyz")

        assert reference.kind is ReferenceKind.OTHER
        assert reference.uri == "spotify:episode:xyz"

    def test_original_input_retained(self):
        """The exact input is kept; equality ignores it"""
        value = "  https://open.spotify.com/show/abc?si=1 "
        reference = parse_uri(value)

        assert reference.original == value
        assert reference.uri == "spotify:show:abc"
        assert reference == parse_uri("spotify:show:abc")

    @pytest.mark.parametrize("value", [
        "https://open.spotify.com/track",
        "https://open.spotify.com/",
        "https://open.spotify.com",
    ])
    def test_too_few_path_segments(self, value):
        """Web URLs need a kind and an id"""
        with pytest.raises(InvalidReferenceError):
            parse_uri(value)

    @pytest.mark.parametrize("value", [
        "https://example.com/track/abc",
        "https://spotify.com/track/abc",
        "https://play.spotify.com/track/abc",
    ])
    def test_other_hosts_rejected(self, value):
        """Only the web player host is accepted"""
        with pytest.raises(InvalidReferenceError) as exc_info:
            parse_uri(value)

        assert exc_info.value.details["reference"] == value

    @pytest.mark.parametrize("value", ["", "not a uri", "4cOdK2wGLETKBW3PvgPWqT", "ftp://open.spotify.com/track/a"])
    def test_garbage_rejected(self, value):
        """Bare ids and random text are not references"""
        with pytest.raises(InvalidReferenceError):
            parse_uri(value)


class TestIdempotence:
    """parse_uri(ref.uri) == ref"""

    @pytest.mark.parametrize("value", [
        "spotify:track:4cOdK2wGLETKBW3PvgPWqT",
        "https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M?si=1",
        "spotify:show:abc",
        "https://open.spotify.com/intl-fr/album/xyz",
    ])
    def test_reparse_canonical(self, value):
        """Re-parsing the canonical form yields the same reference"""
        reference = parse_uri(value)

        assert parse_uri(reference.uri) == reference
        assert str(reference) == reference.uri
