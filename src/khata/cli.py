"""
Command-line interface for the khata client core.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from khata.config import configure_logging, get_settings

app = typer.Typer(
    name="khata",
    help="Khata business client - cache-first sync and team permissions",
)
cache_app = typer.Typer(help="Inspect or clear the local cache")
app.add_typer(cache_app, name="cache")
console = Console()


def _format_money(amount: float) -> str:
    return f"₹{abs(round(amount)):,}"


@app.command()
def sync(
    screen: str = typer.Option("khata", "--screen", "-s", help="Screen to sync (khata, inventory, profile)"),
    cache_path: Path = typer.Option(None, "--cache-path", help="SQLite cache file"),
    base_url: str = typer.Option(None, "--base-url", help="API base URL"),
):
    """Load a screen from cache, refresh it from the API and show the result."""
    from khata.sync.screens import SCREENS

    settings = get_settings()
    configure_logging(settings.log_level)

    definition = SCREENS.get(screen)
    if definition is None:
        console.print(f"[red]Unknown screen: {screen}[/red] (choose from {', '.join(SCREENS)})")
        raise typer.Exit(code=1)

    async def _sync():
        from khata.remote.http_client import KhataAPIClient
        from khata.storage.sqlite_store import SQLiteStore
        from khata.sync.coordinator import SyncCoordinator

        store = SQLiteStore(cache_path or settings.resolved_cache_path)
        await store.initialize()

        try:
            async with KhataAPIClient(
                store,
                base_url=base_url or settings.api_base_url,
                timeout=settings.api_timeout,
            ) as remote:
                coordinator = SyncCoordinator.for_screen(definition, store, remote)
                try:
                    with Progress(
                        SpinnerColumn(),
                        TextColumn("[progress.description]{task.description}"),
                        console=console,
                    ) as progress:
                        task = progress.add_task(f"Refreshing {definition.name}...", total=None)
                        report = await coordinator.refresh()
                        progress.update(task, completed=True)
                finally:
                    await coordinator.close()
        finally:
            await store.close()

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Resource")
        table.add_column("Source")
        table.add_column("Fetched At")
        table.add_column("Outcome")

        for key, entry in report.snapshot.items():
            outcome = report.outcomes.get(key)
            status = outcome.value if outcome else "-"
            if status == "failed":
                status = "[red]failed[/red]"
            elif status == "updated":
                status = "[green]updated[/green]"
            table.add_row(
                key.value,
                entry.source.value if entry.source else "empty",
                entry.fetched_at.strftime("%Y-%m-%d %H:%M:%S") if entry.fetched_at else "-",
                status,
            )

        console.print(table)

        for failure in report.failures:
            console.print(f"[yellow]{failure.kind.value}[/yellow] {failure.message}")

        if definition.name == "khata":
            _print_khata(report.snapshot)
        elif definition.name == "inventory":
            _print_inventory(report.snapshot)

    asyncio.run(_sync())


def _print_khata(snapshot) -> None:
    from khata.views.aggregation import KhataView

    view = KhataView.from_snapshot(snapshot)

    console.print(f"\n[bold]{view.business_name}[/bold]\n")
    console.print(f"To receive: {_format_money(view.to_receive)}   To give: {_format_money(view.to_give)}")
    console.print(f"Customers: {view.customers_count}")

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Period")
    table.add_column("Credits")
    table.add_column("Payments")
    table.add_column("Count")
    for label, stats in (("Today", view.today), ("This month", view.month)):
        table.add_row(label, _format_money(stats.credits), _format_money(stats.payments), str(stats.count))
    console.print(table)

    if view.customers_who_owe:
        console.print("\n[bold]Customers who owe[/bold]")
        for customer in view.customers_who_owe:
            console.print(f"  {customer.name}: {_format_money(customer.balance)}")


def _print_inventory(snapshot) -> None:
    from khata.schema.cache import ResourceKey
    from khata.views.aggregation import inventory_stats

    stats = inventory_stats(snapshot.value(ResourceKey.PRODUCTS, []))
    console.print(
        f"\nProducts: {stats.total}   Stock value: {_format_money(stats.total_value)}   "
        f"Low stock: {stats.low_stock}"
    )


@cache_app.command("show")
def cache_show(
    cache_path: Path = typer.Option(None, "--cache-path", help="SQLite cache file"),
):
    """List cached resources."""

    async def _show():
        from khata.storage.sqlite_store import SQLiteStore

        store = SQLiteStore(cache_path or get_settings().resolved_cache_path)
        await store.initialize()

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Key")
        table.add_column("Size")
        table.add_column("Updated")

        try:
            for key in await store.keys():
                value = await store.get(key) or ""
                updated = await store.updated_at(key)
                table.add_row(key, f"{len(value)} B", updated.strftime("%Y-%m-%d %H:%M:%S") if updated else "-")
        finally:
            await store.close()
        console.print(table)

    asyncio.run(_show())


@cache_app.command("clear")
def cache_clear(
    cache_path: Path = typer.Option(None, "--cache-path", help="SQLite cache file"),
    keep_session: bool = typer.Option(True, "--keep-session/--all", help="Keep the auth token and profile"),
):
    """Remove cached screen data."""

    async def _clear():
        from khata.schema.cache import AUTH_TOKEN_KEY, CACHE_KEYS, ResourceKey
        from khata.storage.sqlite_store import SQLiteStore

        store = SQLiteStore(cache_path or get_settings().resolved_cache_path)
        await store.initialize()

        keys = list(CACHE_KEYS.values())
        if keep_session:
            keys.remove(CACHE_KEYS[ResourceKey.PROFILE])
        else:
            keys.append(AUTH_TOKEN_KEY)

        try:
            removed = await store.remove_many(keys)
        finally:
            await store.close()
        console.print(f"Removed {removed} cached entries")

    asyncio.run(_clear())


@app.command()
def roles():
    """Show what each team role is allowed to do."""
    from khata.permissions.model import permissions_for
    from khata.schema.member import ROLE_INFO, PermissionSet, Role

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Permission")
    for role in Role:
        table.add_column(ROLE_INFO[role].label)

    for flag in PermissionSet.model_fields:
        row = [flag]
        for role in Role:
            row.append("[green]yes[/green]" if getattr(permissions_for(role), flag) else "[red]no[/red]")
        table.add_row(*row)

    console.print(table)


if __name__ == "__main__":
    app()
