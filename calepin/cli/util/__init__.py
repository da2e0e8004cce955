"""CLI utilities (XDG directories, service wiring)."""

from calepin.cli.util.paths import CalepinPaths
from calepin.cli.util.runtime import card_cache, card_feed, fail, load_config, open_catalog, run

__all__ = [
    "CalepinPaths",
    "card_cache",
    "card_feed",
    "fail",
    "load_config",
    "open_catalog",
    "run",
]
