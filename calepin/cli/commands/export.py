"""Retrieve every record of every source, optionally as a JSON file."""

from datetime import UTC, datetime
from pathlib import Path

import cyclopts

from calepin.cli.console import get_console
from calepin.cli.util import load_config, open_catalog, run
from calepin.config import Config
from calepin.domain.knowledge.model.record import Record, Source
from calepin.domain.shared.error import CalepinError
from calepin.domain.shared.model.value import ValueObject

app = cyclopts.App(name="export", help="Retrieve all records of all sources")


class SourceExport(ValueObject):
    id: str
    title: str
    icon: str | None = None
    url: str | None = None
    properties: list[str] = []
    record_count: int = 0
    records: list[Record] = []
    error: str | None = None  # Set when retrieval stopped early


class ExportReport(ValueObject):
    retrieved_at: datetime
    total_sources: int
    sources: list[SourceExport]


def _export_of(source: Source) -> SourceExport:
    return SourceExport(
        id=source.id,
        title=source.title,
        icon=source.icon,
        url=source.url,
        properties=source.properties,
    )


async def collect(config: Config, limit: int | None = None) -> ExportReport:
    """Every source with its records; a failing source keeps what was read so far."""
    console = get_console()
    exports: list[SourceExport] = []

    async with open_catalog(config) as catalog:
        for source in await catalog.list_sources():
            export = _export_of(source)
            try:
                async for record in catalog.iter_records(
                    source.id, limit=limit, declared=frozenset(source.properties) or None
                ):
                    export.records.append(record)
            except CalepinError as e:
                console.error(f"{source.title}: {e.message}")
                export.error = e.message
            export.record_count = len(export.records)
            exports.append(export)

    return ExportReport(
        retrieved_at=datetime.now(UTC),
        total_sources=len(exports),
        sources=exports,
    )


@app.default
def export(
    *,
    json: bool = False,
    output: Path = Path("all-pages.json"),
    limit: int | None = None,
) -> None:
    """Fetch all records of all sources and print a summary.

    Args:
        json: Also write the full result to a JSON file.
        output: File written with --json.
        limit: Maximum number of records per source.
    """
    console = get_console()
    config = load_config()

    with console.status("Retrieving records..."):
        report = run(collect(config, limit=limit))

    total = sum(source.record_count for source in report.sources)
    console.table(
        [
            {
                "title": f"{source.icon} {source.title}" if source.icon else source.title,
                "records": source.record_count,
                "status": "[red]partial[/red]" if source.error else "[green]complete[/green]",
            }
            for source in report.sources
        ],
        columns=[("title", "Source"), ("records", "Records"), ("status", "Status")],
        numbered=True,
    )
    console.success(f"{total} record{'s' if total != 1 else ''} in {report.total_sources} sources")

    if json:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(report.model_dump_json(indent=2))
        console.success(f"Saved to {output}")
