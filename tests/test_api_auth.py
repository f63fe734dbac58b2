import urllib.parse

import pytest

from nowplaying_relay.api.routes import auth
from nowplaying_relay.core import spotify_client
from nowplaying_relay.core.return_path import decode_state, encode_state


@pytest.fixture
def credentials(monkeypatch):
    for module in (auth, spotify_client):
        monkeypatch.setattr(module, "SPOTIFY_CLIENT_ID", "cid")
        monkeypatch.setattr(module, "SPOTIFY_CLIENT_SECRET", "secret")
    monkeypatch.setattr(auth, "FRONTEND_URI", "https://overlay.example")


def _query(url: str) -> dict:
    return dict(urllib.parse.parse_qsl(urllib.parse.urlparse(url).query))


def test_login_redirects_to_spotify_with_state(client, credentials):
    response = client.get("/login", params={"return": "/widget?theme=dark"}, follow_redirects=False)
    assert response.status_code == 302
    location = response.headers["location"]
    assert location.startswith("https://accounts.spotify.com/authorize")
    params = _query(location)
    assert params["client_id"] == "cid"
    assert "user-read-currently-playing" in params["scope"]
    assert "show_dialog" in params
    nonce, return_path = decode_state(params["state"])
    assert len(nonce) == 16
    assert return_path == "/widget?theme=dark"
    assert response.cookies.get(auth.STATE_COOKIE) == nonce


def test_login_drops_offsite_return(client, credentials):
    response = client.get("/login", params={"return": "//evil.example/x"}, follow_redirects=False)
    _, return_path = decode_state(_query(response.headers["location"])["state"])
    assert return_path == "/"


def test_login_without_credentials_is_503(client, monkeypatch):
    monkeypatch.setattr(auth, "SPOTIFY_CLIENT_ID", "")
    response = client.get("/login", follow_redirects=False)
    assert response.status_code == 503


def test_callback_redirects_with_tokens(client, credentials, monkeypatch):
    monkeypatch.setattr(
        auth, "exchange_code", lambda code: {"access_token": "AT", "refresh_token": "RT"}
    )
    state = encode_state("n" * 16, "/widget")
    response = client.get("/callback", params={"code": "c", "state": state}, follow_redirects=False)
    assert response.status_code == 302
    location = response.headers["location"]
    assert location.startswith("https://overlay.example/widget?")
    assert _query(location) == {"access_token": "AT", "refresh_token": "RT"}


def test_callback_failure_redirects_with_error(client, credentials, monkeypatch):
    monkeypatch.setattr(auth, "exchange_code", lambda code: None)
    response = client.get("/callback", params={"code": "bad"}, follow_redirects=False)
    assert response.headers["location"] == "https://overlay.example/?error=invalid_token"


def test_callback_without_code_never_exchanges(client, credentials, monkeypatch):
    calls = []
    monkeypatch.setattr(auth, "exchange_code", lambda code: calls.append(code))
    response = client.get("/callback", follow_redirects=False)
    assert _query(response.headers["location"]) == {"error": "invalid_token"}
    assert calls == []


def test_callback_rejects_mismatched_nonce(client, credentials, monkeypatch):
    monkeypatch.setattr(auth, "exchange_code", lambda code: {"access_token": "AT"})
    client.cookies.set(auth.STATE_COOKIE, "a" * 16)
    state = encode_state("b" * 16, "/")
    response = client.get("/callback", params={"code": "c", "state": state}, follow_redirects=False)
    assert _query(response.headers["location"]) == {"error": "state_mismatch"}


def test_refresh_token_success(client, monkeypatch):
    monkeypatch.setattr(
        auth, "refresh_access_token", lambda token: {"access_token": "new", "refresh_token": token}
    )
    response = client.get("/refresh_token", params={"refresh_token": "RT"})
    assert response.status_code == 200
    assert response.json() == {"access_token": "new"}


def test_refresh_token_rotated(client, monkeypatch):
    monkeypatch.setattr(
        auth, "refresh_access_token", lambda token: {"access_token": "new", "refresh_token": "RT2"}
    )
    response = client.get("/refresh_token", params={"refresh_token": "RT"})
    assert response.json() == {"access_token": "new", "refresh_token": "RT2"}


def test_refresh_token_failure_is_400(client, monkeypatch):
    monkeypatch.setattr(auth, "refresh_access_token", lambda token: None)
    response = client.get("/refresh_token", params={"refresh_token": "RT"})
    assert response.status_code == 400
    assert response.json() == {"error": "Failed to refresh token"}


def test_refresh_token_missing_is_400(client):
    response = client.get("/refresh_token")
    assert response.status_code == 400


def test_callback_keeps_fragment_after_query(client, credentials, monkeypatch):
    monkeypatch.setattr(auth, "exchange_code", lambda code: {"access_token": "AT"})
    state = encode_state("n" * 16, "/widget#top")
    response = client.get("/callback", params={"code": "c", "state": state}, follow_redirects=False)
    assert response.headers["location"] == (
        "https://overlay.example/widget?access_token=AT&refresh_token=#top"
    )
