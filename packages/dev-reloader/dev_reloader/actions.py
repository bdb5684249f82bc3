from __future__ import annotations

from asyncio import to_thread
from logging import getLogger
from subprocess import Popen, TimeoutExpired
from threading import Lock
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from pathlib import Path


class ProcessReloader:
    """Keep `command` running, and start a fresh one whenever it is called."""

    def __init__(
        self,
        command: Sequence[str],
        *,
        cwd: str | Path | None = None,
        env: Mapping[str, str] | None = None,
        shutdown_timeout: float = 5.0,
        logger_name: str = "dev_reloader",
    ):
        if not command:
            raise ValueError("Command must not be empty")
        self.command = [*command]
        self.cwd = cwd
        self.env = None if env is None else dict(env)
        self.shutdown_timeout = shutdown_timeout
        self.logger = getLogger(logger_name)
        self.process: Popen[bytes] | None = None
        self._lock = Lock()

    @property
    def running(self) -> bool:
        return self.process is not None and self.process.poll() is None

    def start(self) -> None:
        with self._lock:
            self._start()

    def stop(self) -> None:
        with self._lock:
            self._stop()

    def restart(self) -> None:
        with self._lock:
            self._stop()
            self._start()

    async def __call__(self) -> None:
        await to_thread(self.restart)

    def _start(self) -> None:
        self.logger.info("Starting %s", " ".join(self.command))
        self.process = Popen(self.command, cwd=self.cwd, env=self.env)

    def _stop(self) -> None:
        if (process := self.process) is None:
            return
        self.process = None
        if process.poll() is not None:
            return

        process.terminate()
        try:
            process.wait(timeout=self.shutdown_timeout)
        except TimeoutExpired:
            self.logger.warning("Process %d did not exit within %ss, killing it", process.pid, self.shutdown_timeout)
            process.kill()
            process.wait()


class BrowserReloader:
    """Open `page_url` in the system browser, reusing an existing window where the browser allows it."""

    def __init__(self, page_url: str, *, logger_name: str = "dev_reloader"):
        self.page_url = page_url
        self.logger = getLogger(logger_name)

    def __call__(self) -> None:
        import webbrowser

        try:
            opened = webbrowser.open(self.page_url, new=0)
        except webbrowser.Error:
            opened = False

        if opened:
            self.logger.info("Your app is running at <%s>!", self.page_url)
        else:
            self.logger.error("Failed to open the browser automatically, open the app at <%s>.", self.page_url)
