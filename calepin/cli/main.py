"""Main CLI application using Cyclopts.

Reporting commands talk to the Notion API directly with NOTION_SECRET,
or through a running proxy when CALEPIN_CLIENT__BASE_URL is set.
"""

import cyclopts

from calepin.cli.commands import cache, cards, datasources, export, proxy, query, sources

app = cyclopts.App(
    name="calepin",
    help="Calepin - Notion proxy and card feeds",
)

app.command(sources.app, name="sources")
app.command(datasources.app, name="datasources")
app.command(query.app, name="query")
app.command(export.app, name="export")
app.command(cards.app, name="cards")
app.command(cache.app, name="cache")
app.command(proxy.app, name="proxy")
