"""
Spotify session construction.

MetadataClient takes an already authenticated spotipy.Spotify instance;
this module builds one from the configured credentials using the
client credentials flow (public catalog data only, no browser login).
"""

import spotipy
from spotipy.oauth2 import SpotifyClientCredentials

from spot_tagger.core.config import SpotifyConfig
from spot_tagger.core.exceptions import RemoteServiceError
from spot_tagger.core.logger import get_logger

logger = get_logger(__name__)

# Seconds before a single Web API request is abandoned
REQUEST_TIMEOUT = 10


def create_spotify_session(
    spotify_config: SpotifyConfig,
    verify: bool = False
) -> spotipy.Spotify:
    """
    Build an authenticated spotipy.Spotify session.

    Args:
        spotify_config: Credentials from config.yaml.
        verify: If True, issue one tiny search so bad credentials fail
                here instead of on the first real request.

    Returns:
        A spotipy.Spotify instance using client credentials auth.

    Raises:
        RemoteServiceError: If verification fails (is_auth_error=True).
    """
    auth_manager = SpotifyClientCredentials(
        client_id=spotify_config.client_id,
        client_secret=spotify_config.client_secret
    )
    spotify = spotipy.Spotify(
        auth_manager=auth_manager,
        requests_timeout=REQUEST_TIMEOUT
    )

    if verify:
        try:
            spotify.search(q="test", type="track", limit=1)
        except spotipy.SpotifyException as e:
            raise RemoteServiceError(
                f"Spotify authentication failed: {e}",
                details={"http_status": e.http_status, "original_error": str(e)},
                is_auth_error=True
            ) from e
        except spotipy.oauth2.SpotifyOauthError as e:
            raise RemoteServiceError(
                f"Spotify authentication failed: {e}",
                details={"original_error": str(e)},
                is_auth_error=True
            ) from e
        logger.debug("Spotify credentials verified")

    return spotify
