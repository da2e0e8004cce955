"""Sources with their dates and emptiness probe, then recent standalone pages."""

import logging

import cyclopts

from calepin.cli.console import get_console, relative_time
from calepin.cli.util import load_config, open_catalog, run
from calepin.config import Config
from calepin.domain.knowledge.model.record import Page, Source
from calepin.domain.shared.error import CalepinError

logger = logging.getLogger(__name__)

app = cyclopts.App(name="datasources", help="Inspect every data source visible to the integration")

RECENT_PAGES = 20


async def _inspect(config: Config) -> tuple[list[tuple[Source, str]], list[Page], bool]:
    async with open_catalog(config) as catalog:
        probed: list[tuple[Source, str]] = []
        for source in await catalog.list_sources():
            try:
                records, has_more = await catalog.sample_records(source.id, page_size=1)
            except CalepinError as e:
                logger.debug("Probe of %s failed: %s", source.id, e.message)
                probed.append((source, "[dim]Content unavailable[/dim]"))
                continue
            if records:
                more = "+" if has_more else ""
                probed.append((source, f"Contains records (at least {len(records)}{more})"))
            else:
                probed.append((source, "Empty"))

        pages, more_pages = await catalog.recent_pages(RECENT_PAGES)
        return probed, pages, more_pages


@app.default
def datasources() -> None:
    """Show every source with its dates and content, then the latest pages."""
    console = get_console()
    config = load_config()

    with console.status("Inspecting data sources..."):
        probed, pages, more_pages = run(_inspect(config))

    console.print(f"[bold]Sources ({len(probed)})[/bold]\n")
    for i, (source, content) in enumerate(probed, 1):
        icon = f"{source.icon} " if source.icon else ""
        console.print(f"[bold blue][{i}][/bold blue] {icon}{source.title}")
        console.print(f"    [dim]ID:[/dim] {source.id}")
        console.print(
            f"    [dim]Created:[/dim] {relative_time(source.created_time)}"
            f"    [dim]Modified:[/dim] {relative_time(source.last_edited_time)}"
        )
        console.print(f"    [dim]Properties:[/dim] {len(source.properties)}    {content}")
        console.print()

    console.print(f"[bold]Recent pages ({len(pages)}{'+' if more_pages else ''})[/bold]\n")
    if not pages:
        console.info("No standalone pages found")
        return
    for page in pages:
        parent = page.parent.get("type", "workspace")
        edited = relative_time(page.last_edited_time)
        console.print(f"  {page.icon or '-'} {page.title} [dim]({parent}, {edited})[/dim]")
