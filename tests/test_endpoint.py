"""Tests for deriving the dev websocket address."""

import pytest

from dev_reloader import WEBSOCKET_PATH, websocket_url, websocket_url_for_page


class TestWebsocketUrl:
    """Tests for websocket_url."""

    def test_default_host(self):
        """Defaults to the local dev server port."""
        assert websocket_url() == "ws://localhost:4000/_bevy_dev/websocket"

    def test_secure(self):
        """Secure connections use wss."""
        assert websocket_url("example.test", secure=True) == "wss://example.test/_bevy_dev/websocket"

    def test_custom_path_gets_leading_slash(self):
        """Relative routes are anchored at the root."""
        assert websocket_url("localhost:8080", path="ws") == "ws://localhost:8080/ws"

    @pytest.mark.parametrize("host", ["", "   ", "http://localhost:4000", "localhost:abc", "localhost:99999"])
    def test_invalid_host(self, host):
        """Empty hosts, hosts with a scheme and unusable ports are rejected."""
        with pytest.raises(ValueError):
            websocket_url(host)


class TestWebsocketUrlForPage:
    """Tests for websocket_url_for_page."""

    @pytest.mark.parametrize(
        ("page", "expected"),
        [
            ("http://localhost:4000/", "ws://localhost:4000"),
            ("https://app.example.test/index.html?x=1", "wss://app.example.test"),
            ("HTTP://127.0.0.1:1334", "ws://127.0.0.1:1334"),
            ("wss://dev.example.test:443/anything", "wss://dev.example.test:443"),
        ],
    )
    def test_scheme_and_host_follow_the_page(self, page, expected):
        """Keeps the page's host and maps http(s) to ws(s)."""
        assert websocket_url_for_page(page) == expected + WEBSOCKET_PATH

    @pytest.mark.parametrize("page", ["ftp://example.test/", "localhost:4000", "http:///index.html", "http://localhost:99999/", "https://example.test:port/"])
    def test_invalid_page(self, page):
        """Unsupported schemes, missing hosts and unusable ports are rejected."""
        with pytest.raises(ValueError):
            websocket_url_for_page(page)
