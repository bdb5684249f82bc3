import inspect
from collections.abc import Callable
from contextlib import suppress
from enum import Enum
from logging import basicConfig
from typing import Annotated

from typer import Argument, Option, Typer, secho

from ._endpoint import DEFAULT_HOST, WEBSOCKET_PATH, websocket_url, websocket_url_for_page
from .actions import BrowserReloader, ProcessReloader
from .client import DEFAULT_RETRY_INTERVAL_MS, HookReturn, ReloadClientConfig, run_client

__all__ = ["app", "main"]


class LogLevel(str, Enum):
    critical = "critical"
    error = "error"
    warning = "warning"
    info = "info"
    debug = "debug"


app = Typer(help="Reload your app whenever the dev server restarts or asks for it", add_completion=False, pretty_exceptions_enable=False, rich_markup_mode="markdown")


@app.command()
def main(
    command: Annotated[list[str] | None, Argument(help="Command to run and restart on every reload. Put it after `--`.", show_default=False)] = None,
    host: Annotated[str, Option("--host", help="Network location of the dev server (`host:port`).")] = DEFAULT_HOST,
    page_url: Annotated[str | None, Option("--page-url", help="Derive the websocket address from this page instead of `--host`.")] = None,
    secure: Annotated[bool, Option("--secure", help="Connect with `wss://` (ignored with `--page-url`).")] = False,  # noqa: FBT002
    path: Annotated[str, Option("--path", help="Websocket route on the dev server.")] = WEBSOCKET_PATH,
    retry_interval_ms: Annotated[int, Option("--retry-interval-ms", min=1, envvar="DEV_RELOADER_RETRY_MS", help="Delay before each reconnect attempt in milliseconds.")] = DEFAULT_RETRY_INTERVAL_MS,
    open_browser: Annotated[bool, Option("--open", help="Open the page in the browser on start and on every reload.")] = False,  # noqa: FBT002
    log_level: Annotated[LogLevel, Option("--log-level", case_sensitive=False)] = LogLevel.info,
):
    try:
        url = websocket_url_for_page(page_url, path=path) if page_url else websocket_url(host, secure=secure, path=path)
    except ValueError as e:
        secho("Invalid dev server address: ", fg="red", nl=False)
        secho(str(e), fg="yellow")
        exit(1)

    basicConfig(level=log_level.value.upper(), format="%(levelname)s:     %(message)s")

    actions: list[Callable[[], HookReturn]] = []
    process = ProcessReloader(command) if command else None
    if process is not None:
        actions.append(process)
    if open_browser:
        actions.append(BrowserReloader(page_url or f"{'https' if secure else 'http'}://{host}"))

    async def reload():
        for action in actions:
            if inspect.isawaitable(res := action()):
                await res

    if process is not None:
        process.start()
    if open_browser:
        actions[-1]()

    try:
        with suppress(KeyboardInterrupt):
            run_client(ReloadClientConfig(url=url, retry_interval_ms=retry_interval_ms), reload=reload if actions else None)
    finally:
        if process is not None:
            process.stop()


if __name__ == "__main__":
    app()
