"""Proxy server commands."""

import os

import cyclopts
import logfire
import uvicorn

from calepin.cli.console import get_console
from calepin.cli.util import CalepinPaths, load_config

app = cyclopts.App(name="proxy", help="Notion proxy server")


@app.command
def serve(
    host: str = "0.0.0.0",
    port: int = 3000,
    log_to_file: bool = False,
) -> None:
    """Run the Notion proxy in the foreground.

    Args:
        host: Host to bind to.
        port: Port to listen on.
        log_to_file: Write logs to ~/.local/state/calepin/logs/proxy.log instead of stderr.
    """
    console = get_console()
    paths = CalepinPaths()
    config = load_config(paths)

    if not config.secret and config.proxy.secret_mode != "client":
        console.warning("NOTION_SECRET is not configured; requests will be answered with 500")

    if log_to_file:
        paths.ensure_directories()
        os.environ["CALEPIN_LOG_FILE"] = str(paths.proxy_log)
        console.print(f"  [dim]Logs:[/dim] {paths.proxy_log}")

    # Must happen before the app module is imported
    logfire.configure(service_name="calepin-proxy", send_to_logfire="if-token-present", console=False)

    console.success(f"Proxy listening on http://{host}:{port}{config.proxy.prefix}")
    uvicorn.run("calepin.application.api.rest.app:app", host=host, port=port)
