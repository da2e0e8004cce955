"""Print every record of one source."""

import cyclopts

from calepin.cli.console import get_console
from calepin.cli.util import load_config, open_catalog, run
from calepin.config import Config
from calepin.domain.knowledge.model.record import Record, SourceSchema
from calepin.domain.shared.error import RoutingError

app = cyclopts.App(name="query", help="Show the records of a source")


async def fetch_source(config: Config, source_id: str | None) -> tuple[SourceSchema, list[Record]]:
    async with open_catalog(config) as catalog:
        if source_id is None:
            name = config.catalog.sources[0].name if config.catalog.sources else ""
            source = await catalog.get_source_by_name(name) if name else None
            if source is None:
                raise RoutingError(f"No source id given and no source named {name!r}")
            source_id = source.id

        schema = await catalog.get_source_schema(source_id)
        records = await catalog.query_records(source_id, declared=frozenset(schema.properties) or None)
        return schema, records


@app.default
def query(source_id: str | None = None, /, *, raw: bool = False) -> None:
    """Print a source's properties and every record in it.

    Args:
        source_id: Database id, with or without hyphens. Defaults to the first catalog source.
        raw: Print each record as JSON instead of formatted values.
    """
    console = get_console()
    config = load_config()

    with console.status("Querying source..."):
        schema, records = run(fetch_source(config, source_id))

    properties = "\n".join(
        f"[cyan]{name}[/cyan] [dim]({prop.type})[/dim]" for name, prop in schema.properties.items()
    )
    console.panel(
        properties or "[dim]No properties[/dim]",
        title=f"[bold]{schema.title}[/bold]",
        subtitle=schema.id,
    )

    if not records:
        console.warning("The source contains no records")
        return

    console.success(f"{len(records)} record{'s' if len(records) != 1 else ''}")
    for i, record in enumerate(records, 1):
        if raw:
            console.print(record.model_dump_json(indent=2), highlight=False)
        else:
            console.record_detail(record, i, len(records))
