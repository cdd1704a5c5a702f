"""Test Spotify session construction"""

from unittest.mock import patch

import pytest
import spotipy

from spot_tagger.core.config import SpotifyConfig
from spot_tagger.core.exceptions import RemoteServiceError
from spot_tagger.spotify.session import REQUEST_TIMEOUT, create_spotify_session

CREDENTIALS = SpotifyConfig(client_id="id", client_secret="secret", market="US")


class TestCreateSpotifySession:
    """Test create_spotify_session()"""

    def test_client_credentials(self):
        """Session uses client credentials and the request timeout"""
        with patch("spot_tagger.spotify.session.SpotifyClientCredentials") as credentials, \
             patch("spot_tagger.spotify.session.spotipy.Spotify") as spotify_cls:
            session = create_spotify_session(CREDENTIALS)

        credentials.assert_called_once_with(client_id="id", client_secret="secret")
        spotify_cls.assert_called_once_with(
            auth_manager=credentials.return_value,
            requests_timeout=REQUEST_TIMEOUT
        )
        assert session is spotify_cls.return_value
        session.search.assert_not_called()

    def test_verify_success(self):
        with patch("spot_tagger.spotify.session.SpotifyClientCredentials"), \
             patch("spot_tagger.spotify.session.spotipy.Spotify") as spotify_cls:
            create_spotify_session(CREDENTIALS, verify=True)

        spotify_cls.return_value.search.assert_called_once_with(q="test", type="track", limit=1)

    def test_verify_rejected(self):
        """Bad credentials surface as an auth error"""
        with patch("spot_tagger.spotify.session.SpotifyClientCredentials"), \
             patch("spot_tagger.spotify.session.spotipy.Spotify") as spotify_cls:
            spotify_cls.return_value.search.side_effect = spotipy.SpotifyException(401, -1, "bad")

            with pytest.raises(RemoteServiceError) as exc_info:
                create_spotify_session(CREDENTIALS, verify=True)

        assert exc_info.value.is_auth_error
