"""
Menu Admin CLI.

Operational commands that have no HTTP surface: creating the schema,
bootstrapping the first super-admin, inspecting the platform.

Run:
    menu-admin --help
"""

import asyncio
import sys
import time
from typing import Any, Awaitable, Callable

import httpx
import typer
from fastapi import HTTPException
from rich.console import Console
from rich.table import Table

from admin_api.container import AppContainer
from admin_api.services.platform import filter_stats
from shared.config.constants import DEFAULT_ROLE, Roles, StatusFilter
from shared.config.settings import get_settings
from shared.security.auth import sign_identity_token

app = typer.Typer(
    name="menu-admin",
    help="Restaurant menu administration CLI",
    add_completion=False,
)
console = Console()


def _build_container() -> AppContainer:
    return AppContainer.build(get_settings())


def _run(operation: Callable[[AppContainer], Awaitable[Any]]) -> Any:
    """Run ``operation`` against a fresh container; domain errors exit with status 1."""

    async def runner():
        container = _build_container()
        try:
            return await operation(container)
        finally:
            await container.aclose()

    try:
        return asyncio.run(runner())
    except HTTPException as e:
        console.print(f"[red]✗ {e.detail}[/red]")
        raise typer.Exit(1)


# =============================================================================
# Store Commands
# =============================================================================


@app.command()
def init_db():
    """Create the document store schema (SQL backend)."""
    backend = _run(_backend_name)
    console.print(f"[green]✓ Document store ready ({backend})[/green]")


async def _backend_name(container: AppContainer) -> str:
    await container.store.ping()
    return container.store.backend_name


# =============================================================================
# Tenant Commands
# =============================================================================


@app.command()
def create_tenant(
    tenant_id: str = typer.Argument(..., help="Identity (uid) of the account"),
    email: str = typer.Argument(..., help="Account e-mail"),
    name: str = typer.Option("My Restaurant", "--name", help="Restaurant name"),
    role: str = typer.Option(DEFAULT_ROLE, "--role", help=f"One of: {', '.join(Roles.ALL)}"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing profile"),
):
    """Create a tenant profile. Use --role super_admin to bootstrap the first admin."""

    async def _create(container: AppContainer):
        if not force and await container.profiles.get_profile(tenant_id) is not None:
            return None
        return await container.profiles.create_profile(tenant_id, email, name, role=role)

    profile = _run(_create)
    if profile is None:
        console.print(f"[yellow]Profile {tenant_id} already exists (use --force to overwrite)[/yellow]")
        raise typer.Exit(1)
    console.print(f"[green]✓ Created {profile.role} profile {profile.id}[/green]")


@app.command()
def set_role(
    tenant_id: str = typer.Argument(...),
    role: str = typer.Argument(..., help=f"One of: {', '.join(Roles.ALL)}"),
):
    """Promote or demote an account."""
    _run(lambda container: container.aggregator.set_tenant_role(tenant_id, role, actor="cli"))
    console.print(f"[green]✓ {tenant_id} is now {role}[/green]")


@app.command()
def set_active(
    tenant_id: str = typer.Argument(...),
    active: bool = typer.Option(True, "--active/--inactive"),
):
    """Activate or deactivate an account."""
    _run(lambda container: container.aggregator.set_tenant_active(tenant_id, active, actor="cli"))
    console.print(f"[green]✓ {tenant_id} {'activated' if active else 'deactivated'}[/green]")


@app.command()
def tenants(
    search: str = typer.Option("", "--search", "-s", help="Match restaurant name or e-mail"),
    status: str = typer.Option(StatusFilter.ALL, "--status", help="all, active or inactive"),
):
    """List restaurants with their menu counters."""
    stats = _run(lambda container: container.aggregator.all_stats())
    try:
        rows = filter_stats(stats, search, status)
    except HTTPException as e:
        console.print(f"[red]✗ {e.detail}[/red]")
        raise typer.Exit(1)

    table = Table(title="Restaurants")
    table.add_column("Tenant", style="cyan")
    table.add_column("Restaurant")
    table.add_column("E-mail")
    table.add_column("Active", style="green")
    table.add_column("Categories", justify="right")
    table.add_column("Items", justify="right")
    for row in rows:
        table.add_row(
            row.user_id,
            row.restaurant_name,
            row.email,
            "yes" if row.is_active else "no",
            str(row.total_categories),
            f"{row.active_menu_items}/{row.total_menu_items}",
        )
    console.print(table)


@app.command()
def stats():
    """Show platform-wide statistics."""
    totals = _run(lambda container: container.aggregator.platform_stats())

    table = Table(title="Platform Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Restaurants", str(totals.total_restaurants))
    table.add_row("Active", str(totals.active_restaurants))
    table.add_row("Inactive", str(totals.inactive_restaurants))
    table.add_row("Categories", str(totals.total_categories))
    table.add_row("Menu items", str(totals.total_menu_items))
    table.add_row("Available items", str(totals.active_menu_items))
    table.add_row("Avg items / restaurant", str(totals.average_items_per_restaurant))
    console.print(table)


@app.command()
def orphans(tenant_id: str = typer.Argument(...)):
    """Report menu items whose category no longer exists."""
    items = _run(lambda container: container.category_service.find_orphaned_items(tenant_id))
    if not items:
        console.print("[green]✓ No orphaned menu items[/green]")
        return

    table = Table(title=f"Orphaned menu items for {tenant_id}")
    table.add_column("Item", style="cyan")
    table.add_column("Name")
    table.add_column("Missing category", style="red")
    for item in items:
        table.add_row(item.id, item.name, item.category_id)
    console.print(table)
    raise typer.Exit(1)


# =============================================================================
# Development Commands
# =============================================================================


@app.command()
def issue_token(
    tenant_id: str = typer.Argument(...),
    email: str = typer.Option("", "--email"),
    ttl: int = typer.Option(3600, "--ttl", help="Lifetime in seconds"),
):
    """Print a bearer token for an identity (development only)."""
    if get_settings().environment == "production":
        console.print("[red]Refusing to issue tokens in production[/red]")
        raise typer.Exit(1)
    typer.echo(sign_identity_token(tenant_id, email, ttl_seconds=ttl))


@app.command()
def health(
    url: str = typer.Option("http://localhost:8000/api/health/detailed", help="Detailed health URL"),
):
    """Check a running API instance."""
    start = time.time()
    try:
        response = httpx.get(url, timeout=5.0)
        body = response.json()
    except (httpx.HTTPError, ValueError) as e:
        console.print(f"[red]✗ {type(e).__name__}: {e}[/red]")
        raise typer.Exit(1)
    elapsed = (time.time() - start) * 1000

    table = Table(title=f"Health ({elapsed:.0f}ms)")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Latency", style="yellow")
    for name, component in body.get("components", {}).items():
        latency = component.get("latency_ms")
        table.add_row(name, component.get("status", "?"), f"{latency:.0f}ms" if latency is not None else "-")
    console.print(table)

    if response.status_code != 200:
        raise typer.Exit(1)


@app.command()
def version():
    """Show version information."""
    table = Table(title="Menu Admin Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")
    table.add_row("API", "0.1.0")
    table.add_row("Python", sys.version.split()[0])
    console.print(table)


if __name__ == "__main__":
    app()
