"""Card cache management."""

import cyclopts

from calepin.cli.console import get_console
from calepin.cli.util import CalepinPaths, card_cache, load_config

app = cyclopts.App(name="cache", help="Card cache management")


@app.command
def clear() -> None:
    """Remove the cached cards and their source metadata."""
    console = get_console()
    paths = CalepinPaths()
    card_cache(load_config(paths), paths).clear()
    console.success(f"Card cache cleared ({paths.cache_dir})")
