"""
Restaurant back-office CLI.

Command-line interface for common operations: schema setup, demo data,
stock reports and running the API server.
"""

import sys

import typer
from rich.console import Console
from rich.table import Table

from shared.config.settings import settings

app = typer.Typer(
    name="backoffice",
    help="Restaurant Back-Office CLI",
    add_completion=False,
)
console = Console()


# =============================================================================
# Database Commands
# =============================================================================

@app.command()
def init_db():
    """Create all database tables."""
    from shared.infrastructure.db import engine
    from rest_api.models import Base

    console.print("[blue]Creating database tables[/blue]")
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        console.print(f"[red]✗ Schema creation failed: {e}[/red]")
        raise typer.Exit(1)
    console.print("[green]✓ Tables created/verified[/green]")


@app.command()
def seed(
    force: bool = typer.Option(False, "--force", "-f", help="Allow seeding in production"),
):
    """Seed an empty database with demo tables, menu and inventory."""
    from shared.infrastructure.db import get_db_context
    from rest_api.seed import seed as seed_database

    if settings.environment == "production" and not force:
        console.print("[red]Cannot seed production without --force[/red]")
        raise typer.Exit(1)

    with get_db_context() as db:
        inserted = seed_database(db)

    if inserted:
        console.print("[green]✓ Demo data inserted[/green]")
    else:
        console.print("[yellow]Database already has data, nothing to do[/yellow]")


# =============================================================================
# Inventory Commands
# =============================================================================

@app.command()
def low_stock():
    """Show inventory items and tracked menu items that are running low."""
    from shared.infrastructure.db import get_db_context
    from rest_api.services.domain import InventoryService

    with get_db_context() as db:
        alerts = InventoryService(db).get_low_stock_alerts()

    if not alerts:
        console.print("[green]✓ All stock levels are above threshold[/green]")
        return

    table = Table(title="Low Stock")
    table.add_column("Kind", style="cyan")
    table.add_column("Name")
    table.add_column("Current", style="red")
    table.add_column("Threshold", style="yellow")
    table.add_column("Unit")

    for alert in alerts:
        table.add_row(
            alert.kind,
            alert.name,
            str(alert.current),
            str(alert.threshold),
            alert.unit or "-",
        )

    console.print(table)


# =============================================================================
# Server Commands
# =============================================================================

@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(settings.rest_api_port, help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),
):
    """Run the REST API with uvicorn."""
    import uvicorn

    console.print(f"[blue]Starting REST API on {host}:{port}[/blue]")
    uvicorn.run("rest_api.main:app", host=host, port=port, reload=reload)


@app.command()
def version():
    """Show version information."""
    table = Table(title="Back-Office Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("API", "0.1.0")
    table.add_row("Environment", settings.environment)
    table.add_row("Python", sys.version.split()[0])

    console.print(table)


if __name__ == "__main__":
    app()
