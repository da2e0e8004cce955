"""Show the aggregated card feed."""

import cyclopts

from calepin.cli.console import get_console
from calepin.cli.util import card_cache, card_feed, load_config, open_catalog, run
from calepin.config import Config
from calepin.domain.knowledge.model.card import Card

app = cyclopts.App(name="cards", help="Show the card feed of the catalog sources")


async def load_cards(config: Config, refresh: bool = False) -> list[Card]:
    async with open_catalog(config) as catalog:
        feed = card_feed(config, catalog, card_cache(config))
        return await feed.load(refresh=refresh)


@app.default
def cards(*, refresh: bool = False) -> None:
    """Print the cards of every catalog source, served from cache while unchanged.

    Args:
        refresh: Ignore the cached cards and fetch everything again.
    """
    console = get_console()
    config = load_config()

    with console.status("Loading cards..."):
        found = run(load_cards(config, refresh=refresh))

    console.cards(found)
