from __future__ import annotations

import inspect
from asyncio import Event, ensure_future, get_running_loop
from dataclasses import dataclass
from enum import Enum
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING, Any

from ._endpoint import websocket_url
from ._messages import MalformedMessageError, Notification, parse_notification
from .connection import WebSocketConnection

if TYPE_CHECKING:
    from asyncio import Future
    from collections.abc import Awaitable, Callable

    from .connection import Connection

type HookReturn = None | Awaitable[Any]
type ReloadAction = Callable[[], HookReturn]
type ConnectionFactory = Callable[[str], Connection]
type CallLater = Callable[[float, Callable[[], None]], Any]

DEFAULT_RETRY_INTERVAL_MS = 5_000


class ClientState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


@dataclass(frozen=True, slots=True)
class ReloadClientConfig:
    url: str = websocket_url()
    retry_interval_ms: int = DEFAULT_RETRY_INTERVAL_MS
    # Passed to the websocket handshake; `None` waits for as long as the server takes to answer.
    open_timeout_ms: int | None = 10_000

    def __post_init__(self):
        if self.retry_interval_ms <= 0:
            raise ValueError(f"retry_interval_ms must be positive, got {self.retry_interval_ms}")


@dataclass(frozen=True, slots=True)
class ReloadHooks:
    on_connected: Callable[[], HookReturn] | None = None
    on_reconnected: Callable[[], HookReturn] | None = None
    on_connection_lost: Callable[[], HookReturn] | None = None
    on_unknown_message: Callable[[Notification], HookReturn] | None = None


class ReloadClient:
    """Keep a websocket open to the dev server and reload whenever it says so.

    The first successful connection only marks the session as connected. Every later one means the server came back
    after a restart, so it triggers a reload. A closed connection is retried after a fixed interval, forever.
    """

    def __init__(
        self,
        config: ReloadClientConfig | None = None,
        *,
        reload: ReloadAction | None = None,
        hooks: ReloadHooks | None = None,
        connect: ConnectionFactory | None = None,
        call_later: CallLater | None = None,
        logger_name: str = "dev_reloader",
    ):
        self.config = config = config or ReloadClientConfig()
        self.hooks = hooks or ReloadHooks()
        self.logger = getLogger(logger_name)
        self.connection: Connection | None = None
        self.is_first_load = True
        self.is_connected = False

        self._reload = reload
        self._connect = connect or partial(WebSocketConnection, open_timeout=None if config.open_timeout_ms is None else config.open_timeout_ms / 1000)
        self._call_later = call_later
        self._retry: Any = None
        self._tasks: set[Future[Any]] = set()

    @property
    def state(self) -> ClientState:
        return ClientState.CONNECTED if self.is_connected else ClientState.DISCONNECTED

    def start(self) -> None:
        if self.connection is not None:
            raise RuntimeError("Reload client is already running")
        self.is_first_load = True
        self.is_connected = False
        self.reconnect()

    def stop(self) -> None:
        self._cancel_retry()
        self._detach()
        self.is_connected = False

    def reconnect(self) -> None:
        self._cancel_retry()
        self._detach()

        self.connection = connection = self._connect(self.config.url)
        connection.add_listener("open", self.on_open)
        connection.add_listener("close", self.on_close)
        connection.add_listener("message", self.on_message)

    def on_open(self) -> None:
        if self.is_first_load:
            self.logger.info("Connected to dev websocket at %s", self.config.url)
            self._call_hook("on_connected", self.hooks.on_connected)
        else:
            self.logger.info("Reconnected to dev websocket at %s", self.config.url)
            self._call_hook("on_reconnected", self.hooks.on_reconnected)
            self.trigger_reload()

        self.is_first_load = False
        self.is_connected = True

    def on_close(self) -> None:
        if self.is_connected:
            self.logger.warning("Lost connection to the dev server")
            self._call_hook("on_connection_lost", self.hooks.on_connection_lost)

        self.is_connected = False

        call_later = self._call_later or get_running_loop().call_later
        self._retry = call_later(self.config.retry_interval_ms / 1000, self.reconnect)

    def on_message(self, data: str | bytes) -> None:
        try:
            notification = parse_notification(data)
        except MalformedMessageError as e:
            self.logger.warning("Failed to parse websocket message: %s", e)
            return

        if notification.is_reload:
            self.trigger_reload()
            return

        self.logger.warning("Unknown websocket message: %r", notification.payload)
        self._call_hook("on_unknown_message", self.hooks.on_unknown_message, notification)

    def trigger_reload(self) -> None:
        self.logger.info("Reloading...")
        self._call_hook("reload", self._reload)

    def _cancel_retry(self) -> None:
        if self._retry is not None:
            self._retry.cancel()
            self._retry = None

    def _detach(self) -> None:
        if (previous := self.connection) is None:
            return
        previous.remove_listener("open", self.on_open)
        previous.remove_listener("close", self.on_close)
        previous.remove_listener("message", self.on_message)
        previous.close()
        self.connection = None

    def _call_hook(self, hook_name: str, hook: Callable[..., HookReturn] | None, *args: Any) -> None:
        if hook is None:
            return
        try:
            res = hook(*args)
        except Exception:
            self.logger.exception("Hook '%s' failed", hook_name)
            return
        if inspect.isawaitable(res):
            task = ensure_future(res)
            self._tasks.add(task)
            task.add_done_callback(partial(self._on_hook_done, hook_name))

    def _on_hook_done(self, hook_name: str, task: Future[Any]) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and (exc := task.exception()) is not None:
            self.logger.error("Hook '%s' failed", hook_name, exc_info=exc)


async def run_client_async(
    config: ReloadClientConfig | None = None,
    *,
    reload: ReloadAction | None = None,
    hooks: ReloadHooks | None = None,
    logger_name: str = "dev_reloader",
    connect: ConnectionFactory | None = None,
    stop_event: Event | None = None,
) -> None:
    client = ReloadClient(config, reload=reload, hooks=hooks, connect=connect, logger_name=logger_name)
    stop_event = stop_event or Event()
    client.start()
    try:
        await stop_event.wait()
    finally:
        client.stop()


def run_client(
    config: ReloadClientConfig | None = None,
    *,
    reload: ReloadAction | None = None,
    hooks: ReloadHooks | None = None,
    logger_name: str = "dev_reloader",
    connect: ConnectionFactory | None = None,
    stop_event: Event | None = None,
) -> None:
    from asyncio import run

    run(run_client_async(config, reload=reload, hooks=hooks, logger_name=logger_name, connect=connect, stop_event=stop_event))
