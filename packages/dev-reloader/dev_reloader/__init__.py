from ._endpoint import DEFAULT_HOST, WEBSOCKET_PATH, websocket_url, websocket_url_for_page
from ._messages import RELOAD, MalformedMessageError, Notification, parse_notification
from .actions import BrowserReloader, ProcessReloader
from .client import ClientState, ReloadClient, ReloadClientConfig, ReloadHooks, run_client, run_client_async
from .connection import Connection, WebSocketConnection

__all__ = [
    "DEFAULT_HOST",
    "RELOAD",
    "WEBSOCKET_PATH",
    "BrowserReloader",
    "ClientState",
    "Connection",
    "MalformedMessageError",
    "Notification",
    "ProcessReloader",
    "ReloadClient",
    "ReloadClientConfig",
    "ReloadHooks",
    "WebSocketConnection",
    "parse_notification",
    "run_client",
    "run_client_async",
    "websocket_url",
    "websocket_url_for_page",
]
