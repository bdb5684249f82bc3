"""Pytest configuration and fixtures."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest


class FakeConnection:
    """In-memory stand-in for `WebSocketConnection`; events are fired by the test."""

    def __init__(self, url: str):
        self.url = url
        self.is_open = False
        self.closed = False
        self.listeners: dict[str, list[Any]] = {"open": [], "close": [], "message": []}

    def add_listener(self, event, listener):
        self.listeners[event].append(listener)

    def remove_listener(self, event, listener):
        if listener in self.listeners[event]:
            self.listeners[event].remove(listener)

    def close(self):
        self.closed = True
        self.is_open = False

    def fire(self, event, *args):
        if event == "open":
            self.is_open = True
        elif event == "close":
            self.is_open = False
        for listener in list(self.listeners[event]):
            listener(*args)

    @property
    def listener_count(self) -> int:
        return sum(len(bucket) for bucket in self.listeners.values())


@dataclass
class FakeTimer:
    when: float
    callback: Any
    cancelled: bool = False

    def cancel(self):
        self.cancelled = True


@dataclass
class FakeClock:
    """Deterministic replacement for `loop.call_later`."""

    now: float = 0.0
    timers: list[FakeTimer] = field(default_factory=list)

    def call_later(self, delay, callback):
        timer = FakeTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds: float):
        target = self.now + seconds
        while due := sorted((t for t in self.pending if t.when <= target), key=lambda t: t.when):
            timer = due[0]
            self.timers.remove(timer)
            self.now = timer.when
            timer.callback()
        self.now = target


@pytest.fixture
def connections() -> list[FakeConnection]:
    return []


@pytest.fixture
def connect(connections):
    def factory(url: str) -> FakeConnection:
        connection = FakeConnection(url)
        connections.append(connection)
        return connection

    return factory


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
