"""
Spotify reference parsing.

Turns whatever the user pasted (a native "spotify:" URI or a web player
link) into a CanonicalReference. Parsing is pure: no network access, no
validation of the id against the catalog.

Accepted inputs:
    - spotify:track:4cOdK2wGLETKBW3PvgPWqT
    - spotify:user:someone:playlist:37i9dQZF1DXcBWIGoYBM5M (kept as-is)
    - https://open.spotify.com/album/4aawyAB9vmqN3uQ7FjRGTy?si=xyz
    - https://open.spotify.com/intl-de/track/4cOdK2wGLETKBW3PvgPWqT

Usage:
    from spot_tagger.spotify.uri import parse_uri, ReferenceKind

    reference = parse_uri("https://open.spotify.com/album/4aawyAB9vmqN3uQ7FjRGTy")
    reference.kind  # ReferenceKind.ALBUM
    reference.uri   # "spotify:album:4aawyAB9vmqN3uQ7FjRGTy"
"""

from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import urlsplit

from spot_tagger.core.exceptions import InvalidReferenceError


URI_SCHEME = "spotify"
WEB_PLAYER_HOST = "open.spotify.com"

# Localized web player links carry a leading "intl-<lang>" segment
_LOCALE_PREFIX = "intl-"


class ReferenceKind(Enum):
    """Kind of catalog object a reference points at."""
    TRACK = "track"
    PLAYLIST = "playlist"
    ALBUM = "album"
    ARTIST = "artist"
    OTHER = "other"

    @classmethod
    def from_segment(cls, segment: str) -> "ReferenceKind":
        """Map a URI kind segment to a kind; anything unknown is OTHER."""
        for kind in cls:
            if kind is not cls.OTHER and kind.value == segment:
                return kind
        return cls.OTHER


@dataclass(frozen=True)
class CanonicalReference:
    """
    A parsed Spotify reference.

    Attributes:
        kind: What the reference points at.
        id: The catalog id (base62). Never empty for track, playlist,
            album and artist.
        uri: The canonical "spotify:..." string. For web URLs this is
             "spotify:<kind>:<id>"; native URIs are kept verbatim.
        original: The exact input given to parse_uri(). Not part of
                  equality, so a URL and its canonical URI compare equal.
    """
    kind: ReferenceKind
    id: str
    uri: str
    original: str = field(compare=False)

    @property
    def is_expandable(self) -> bool:
        return self.kind is not ReferenceKind.OTHER

    def __str__(self) -> str:
        return self.uri


def parse_uri(value: str) -> CanonicalReference:
    """
    Parse a Spotify URI or web player URL.

    Args:
        value: "spotify:<kind>:<id>[:...]" or an open.spotify.com URL.

    Returns:
        CanonicalReference for the input. parse_uri(ref.uri) == ref.

    Raises:
        InvalidReferenceError: If a native URI has fewer than three
            segments, a supported kind has an empty id, the URL host is
            not open.spotify.com, or the URL path has fewer than two
            segments.

    Example:
        parse_uri("spotify:track:abc").id  # "abc"
        parse_uri("https://open.spotify.com/track/abc").uri  # "spotify:track:abc"
    """
    original = value
    value = value.strip()

    if value.startswith(f"{URI_SCHEME}:"):
        parts = value.split(":")
        if len(parts) < 3:
            raise InvalidReferenceError(
                f"Invalid Spotify URI (expected spotify:<kind>:<id>): {value}",
                details={"reference": value}
            )
        return _build_reference(parts[1], parts[2], value, original=original)

    try:
        url = urlsplit(value)
    except ValueError as e:
        raise InvalidReferenceError(
            f"Malformed Spotify URL: {value}",
            details={"reference": value, "original_error": str(e)}
        ) from e

    if url.scheme not in ("http", "https") or not url.hostname:
        raise InvalidReferenceError(
            f"Not a Spotify URI or URL: {value}",
            details={"reference": value}
        )

    if url.hostname.lower() != WEB_PLAYER_HOST:
        raise InvalidReferenceError(
            f"Unsupported host in Spotify URL: {url.hostname}",
            details={"reference": value, "host": url.hostname}
        )

    segments = [segment for segment in url.path.split("/") if segment]
    if segments and segments[0].startswith(_LOCALE_PREFIX):
        segments = segments[1:]

    if len(segments) < 2:
        raise InvalidReferenceError(
            f"Spotify URL path must contain a kind and an id: {value}",
            details={"reference": value, "path": url.path}
        )

    kind_segment, item_id = segments[0], segments[1]
    return _build_reference(
        kind_segment,
        item_id,
        f"{URI_SCHEME}:{kind_segment}:{item_id}",
        original=original
    )


def _build_reference(
    kind_segment: str,
    item_id: str,
    uri: str,
    original: str
) -> CanonicalReference:
    kind = ReferenceKind.from_segment(kind_segment)
    if kind is not ReferenceKind.OTHER and not item_id:
        raise InvalidReferenceError(
            f"Spotify {kind.value} reference has an empty id: {original}",
            details={"reference": original, "kind": kind.value}
        )
    return CanonicalReference(kind=kind, id=item_id, uri=uri, original=original)
