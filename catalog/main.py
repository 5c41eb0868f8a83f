#!/usr/bin/env python3
"""
Petro-Core - Catalog Pipeline Entry Point

Runs catalog searches and duplicate reports against the configured store.

Usage:
    python -m catalog.main search granite
    python -m catalog.main search --kind minerals --mineral-category BORATES
    python -m catalog.main duplicates --kind rocks
"""

import asyncio

import click
from loguru import logger
from rich.console import Console
from rich.table import Table

from catalog.connectors import create_store
from catalog.deduplication import find_duplicate_groups, select_representative
from catalog.errors import CatalogError
from catalog.fetcher import fetch_specimens
from catalog.session import SearchSession
from catalog.types import CatalogKind, CatalogQuery, FilterState, SpecimenKind


console = Console()


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def cli(debug):
    """Petro-Core rock and mineral catalog"""
    if debug:
        from catalog.utils.logging import setup_logging
        setup_logging(level="DEBUG")


@cli.command()
@click.argument("text", required=False, default="")
@click.option("--kind", type=click.Choice([k.value for k in CatalogKind]), default="all")
@click.option("--category", default="ALL", help="Limit the fetch to one category")
@click.option("--rock-type", multiple=True, help="Rock type/category facet (repeatable)")
@click.option("--mineral-category", multiple=True, help="Mineral category facet (repeatable)")
@click.option("--color", multiple=True, help="Color facet (repeatable)")
@click.option("--associated-mineral", multiple=True, help="Associated mineral facet (repeatable)")
@click.option("--limit", type=int, default=25, help="Number of rows to show")
def search(text, kind, category, rock_type, mineral_category, color, associated_mineral, limit):
    """
    Search the catalog.

    TEXT is matched against every searchable column of each record.
    """
    query = CatalogQuery(
        kind=CatalogKind(kind),
        search=text,
        category=category,
        filters=FilterState(
            rock_type=list(rock_type),
            mineral_category=list(mineral_category),
            colors=list(color),
            associated_minerals=list(associated_mineral),
        ),
    )

    async def _run():
        async with create_store() as store:
            return await SearchSession(store, debounce_seconds=0).search(query)

    result = asyncio.run(_run())
    if result is None:
        return
    if result.error:
        console.print(f"[red]{result.error}[/red]")
        raise SystemExit(1)

    table = Table(title=f"Catalog search: {text or '(all)'}")
    table.add_column("Kind")
    table.add_column("Title")
    table.add_column("Category")
    table.add_column("Type")
    table.add_column("Path")

    for item in result.items[:limit]:
        table.add_row(
            item.kind.value,
            item.title,
            item.category,
            item.rock_type or "-",
            item.path or "-",
        )

    console.print(table)
    console.print(f"\n[dim]Showing {min(limit, len(result.items))} of {len(result.items)} items[/dim]")


@cli.command()
@click.option("--kind", type=click.Choice([k.plural for k in SpecimenKind]), default="rocks")
def duplicates(kind):
    """Report duplicate groups and the record each would keep."""
    specimen_kind = SpecimenKind(kind[:-1])

    async def _run():
        async with create_store() as store:
            page = await fetch_specimens(store, specimen_kind)
            return find_duplicate_groups(page.records)

    try:
        report = asyncio.run(_run())
    except CatalogError as e:
        console.print(f"[red]{e.user_message}[/red]")
        logger.exception("Duplicate report failed")
        raise SystemExit(1)

    if report.is_clean():
        console.print(f"[green]No duplicate {kind} found[/green]")
        return

    console.print(
        f"\n[bold]{report.group_count} duplicate groups[/bold] "
        f"({report.affected_count} records)\n"
    )

    for label, members in report.groups():
        keep = select_representative(members)
        table = Table(title=label)
        table.add_column("Keep")
        table.add_column("ID")
        table.add_column("Code")
        table.add_column("Name")
        table.add_column("Updated")
        table.add_column("Filled")

        for specimen in members:
            table.add_row(
                "[green]*[/green]" if specimen is keep else "",
                specimen.id or "-",
                specimen.code or "-",
                specimen.name,
                specimen.updated_at or "-",
                str(specimen.completeness()),
            )
        console.print(table)


if __name__ == "__main__":
    cli()
