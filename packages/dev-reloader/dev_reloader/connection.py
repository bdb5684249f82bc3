from __future__ import annotations

from asyncio import CancelledError, ensure_future
from logging import getLogger
from typing import TYPE_CHECKING, Any, Literal, Protocol

from websockets.asyncio.client import connect
from websockets.exceptions import WebSocketException

if TYPE_CHECKING:
    from asyncio import Task
    from collections.abc import Callable

    from websockets.asyncio.client import ClientConnection

type Event = Literal["open", "close", "message"]
type Listener = Callable[..., Any]

EVENTS: tuple[Event, ...] = ("open", "close", "message")

logger = getLogger(__name__)


class Connection(Protocol):
    url: str

    @property
    def is_open(self) -> bool: ...

    def add_listener(self, event: Event, listener: Listener) -> None: ...

    def remove_listener(self, event: Event, listener: Listener) -> None: ...

    def close(self) -> None: ...


class Listeners:
    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {event: [] for event in EVENTS}

    def add(self, event: Event, listener: Listener) -> None:
        self._bucket(event).append(listener)

    def remove(self, event: Event, listener: Listener) -> None:
        bucket = self._bucket(event)
        if listener in bucket:
            bucket.remove(listener)

    def clear(self) -> None:
        for bucket in self._listeners.values():
            bucket.clear()

    def emit(self, event: Event, *args: Any) -> None:
        for listener in list(self._bucket(event)):
            try:
                listener(*args)
            except Exception:
                logger.exception("Websocket '%s' listener failed", event)

    def _bucket(self, event: str) -> list[Listener]:
        try:
            return self._listeners[event]
        except KeyError:
            raise ValueError(f"Unknown websocket event {event!r} (expected one of {', '.join(EVENTS)})") from None


class WebSocketConnection:
    """A websocket that reports its lifecycle through `open`, `close` and `message` listeners.

    Connecting starts as soon as the object is created, so it must be constructed with a running event loop.
    `close` fires exactly once, both when an established session ends and when the connection attempt fails.
    """

    def __init__(self, url: str, *, open_timeout: float | None = 10.0):
        self.url = url
        self._open_timeout = open_timeout
        self._listeners = Listeners()
        self._websocket: ClientConnection | None = None
        self._task: Task[None] = ensure_future(self._run())

    @property
    def is_open(self) -> bool:
        return self._websocket is not None

    def add_listener(self, event: Event, listener: Listener) -> None:
        self._listeners.add(event, listener)

    def remove_listener(self, event: Event, listener: Listener) -> None:
        self._listeners.remove(event, listener)

    def close(self) -> None:
        self._listeners.clear()
        self._task.cancel()

    async def _run(self) -> None:
        try:
            async with connect(self.url, open_timeout=self._open_timeout) as websocket:
                self._websocket = websocket
                self._listeners.emit("open")
                async for message in websocket:
                    self._listeners.emit("message", message)
        except CancelledError:
            self._websocket = None
            raise
        except (OSError, TimeoutError, WebSocketException) as e:
            logger.debug("Websocket %s closed: %r", self.url, e)
        except Exception:
            logger.exception("Websocket %s failed", self.url)

        self._websocket = None
        self._listeners.emit("close")
