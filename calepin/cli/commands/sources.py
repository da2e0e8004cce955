"""List the sources (databases) shared with the integration."""

import cyclopts

from calepin.cli.console import get_console
from calepin.cli.util import load_config, open_catalog, run
from calepin.config import Config
from calepin.domain.knowledge.model.record import Source

app = cyclopts.App(name="sources", help="List the databases shared with the integration")


async def fetch_sources(config: Config) -> list[Source]:
    async with open_catalog(config) as catalog:
        return await catalog.list_sources()


@app.default
def sources() -> None:
    """List every source the secret can read, most recently edited first."""
    console = get_console()
    config = load_config()

    with console.status("Fetching sources..."):
        found = run(fetch_sources(config))

    if not found:
        console.warning("No sources found")
        console.info("Share a database with your integration from its '...' menu > Connections")
        return

    console.success(f"Found {len(found)} source{'s' if len(found) != 1 else ''}")
    console.table(
        [
            {
                "icon": source.icon or "",
                "title": source.title,
                "id": source.id,
                "properties": len(source.properties),
                "url": source.url,
            }
            for source in found
        ],
        columns=[
            ("icon", ""),
            ("title", "Title"),
            ("id", "ID"),
            ("properties", "Properties"),
            ("url", "URL"),
        ],
        numbered=True,
    )
