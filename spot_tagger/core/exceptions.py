"""
Exception classes for spot-tagger.

This module defines all custom exceptions used throughout the application.
Each exception maps to one failure mode so callers can tell bad input,
remote failures and local file failures apart.

Exception Hierarchy:
    SpotTaggerError (base)
        ConfigError - Configuration file issues
        InvalidReferenceError - Malformed Spotify URI or URL
        RemoteServiceError - Spotify Web API issues
        UnsupportedFormatError - Audio container that cannot be tagged
        TagEncodingError - Tag validation or file write issues
"""


class SpotTaggerError(Exception):
    """
    Base exception for all spot-tagger errors.

    All custom exceptions in this project inherit from this class,
    allowing callers to catch all spot-tagger errors with a single
    except clause if desired.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., ids, paths).

    Example:
        try:
            reference = parse_uri(user_input)
        except SpotTaggerError as e:
            logger.error(f"Operation failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'reference': The URI or URL involved in the error
                     - 'file_path': Audio file involved in the error
                     - 'original_error': The underlying exception if wrapping another error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(SpotTaggerError):
    """
    Raised when there's an issue with the configuration file.

    This is a CRITICAL error that should stop program execution.

    Common causes:
        - config.yaml not found
        - config.yaml has invalid YAML syntax
        - Required fields missing (client_id, client_secret)
        - Invalid field values (e.g., unknown separator type)
    """
    pass


class InvalidReferenceError(SpotTaggerError):
    """
    Raised when a Spotify URI or web URL cannot be parsed.

    Common causes:
        - "spotify:" URI with fewer than three segments
        - URL host other than open.spotify.com
        - Web URL path with fewer than two segments
        - An 'other' reference passed where expansion is required

    Example:
        raise InvalidReferenceError(
            "Unsupported host in Spotify URL: example.com",
            details={'reference': 'https://example.com/track/abc'}
        )
    """
    pass


class RemoteServiceError(SpotTaggerError):
    """
    Raised when there's an issue with the Spotify Web API.

    Common causes:
        - Invalid or expired credentials
        - Rate limiting
        - Resource not found or private
        - Network connectivity issues

    Attributes:
        is_auth_error: True if this is an authentication error.
        is_rate_limit: True if this is a rate limit error.

    Example:
        raise RemoteServiceError(
            "Failed to fetch album: not found",
            details={'album_id': album_id, 'http_status': 404}
        )
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        is_auth_error: bool = False,
        is_rate_limit: bool = False
    ) -> None:
        """
        Initialize remote service error with additional flags.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context.
            is_auth_error: Set to True if this is an authentication failure.
            is_rate_limit: Set to True if the service answered 429.
                          No retry is attempted by this package.
        """
        super().__init__(message, details)
        self.is_auth_error = is_auth_error
        self.is_rate_limit = is_rate_limit


class UnsupportedFormatError(SpotTaggerError):
    """
    Raised when asked to tag an audio container with no tag encoder.

    Only MP3 (ID3v2) and Ogg Vorbis (Vorbis comments) are taggable.
    This is raised before the file is opened.
    """
    pass


class TagEncodingError(SpotTaggerError):
    """
    Raised when tags cannot be built or written.

    Common causes:
        - Release date that is not a valid ID3 timestamp
        - Audio file corrupted, missing or not the expected codec
        - Permission denied or disk full while saving
        - Mutating a writer that was already saved

    Example:
        raise TagEncodingError(
            "Invalid release date: not-a-date",
            details={'file_path': '/path/to/song.mp3', 'value': 'not-a-date'}
        )
    """
    pass
