from __future__ import annotations

from urllib.parse import urlsplit

WEBSOCKET_PATH = "/_bevy_dev/websocket"
DEFAULT_HOST = "localhost:4000"

_WS_SCHEMES = {"http": "ws", "https": "wss", "ws": "ws", "wss": "wss"}


def websocket_url(host: str = DEFAULT_HOST, *, secure: bool = False, path: str = WEBSOCKET_PATH) -> str:
    host = host.strip().rstrip("/")
    if not host:
        raise ValueError("Host must not be empty")
    if "://" in host:
        raise ValueError(f"Invalid host (expected 'host[:port]' without a scheme): {host!r}")
    _check_port(host)
    return f"{'wss' if secure else 'ws'}://{host}{_normalize_path(path)}"


def websocket_url_for_page(page_url: str, *, path: str = WEBSOCKET_PATH) -> str:
    parts = urlsplit(page_url)
    if (scheme := _WS_SCHEMES.get(parts.scheme.lower())) is None:
        raise ValueError(f"Unsupported scheme {parts.scheme!r} in page url: {page_url!r}")
    if not parts.netloc:
        raise ValueError(f"Invalid page url (expected 'scheme://host[:port]/...'): {page_url!r}")
    _check_port(parts.netloc)
    return f"{scheme}://{parts.netloc}{_normalize_path(path)}"


def _check_port(netloc: str) -> None:
    try:
        urlsplit(f"//{netloc}").port
    except ValueError as e:
        raise ValueError(f"Invalid port in {netloc!r}: {e}") from e


def _normalize_path(path: str) -> str:
    return path if path.startswith("/") else f"/{path}"
