"""Mini README: Entry point CLI for LandTrack.

Commands:
    * run - serve the FastAPI data-access service with uvicorn.
    * summary - print dashboard totals and per-land profit.
    * settle - settle one land against an entered crop income.

Settings come from ``LANDTRACK_*`` environment variables (see
``landtrack.configuration``); command-line options override them.
"""

from __future__ import annotations

import typer
import uvicorn

from landtrack.configuration import get_settings
from landtrack.dashboard import AggregationEngine
from landtrack.exceptions import NotFound
from landtrack.logging_utils import configure_root_logger
from landtrack.records import LandRecordStore
from landtrack.settlement import SettlementCalculator

cli = typer.Typer(help="Keep land, farmer, expense and crop income records.")


def _open_store() -> LandRecordStore:
    settings = get_settings()
    configure_root_logger(settings.log_level)
    return LandRecordStore.from_settings(settings).open()


@cli.command()
def run(
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    production: bool = typer.Option(
        False, help="Use production server settings (disable auto-reload)."
    ),
) -> None:
    """Start the FastAPI application using uvicorn."""

    settings = get_settings()
    effective_host = host or settings.interface_host
    effective_port = port or settings.interface_port
    configure_root_logger(settings.log_level)

    # Browsers cannot open the 0.0.0.0 sentinel, so point them at localhost.
    browser_host = "127.0.0.1" if effective_host in {"0.0.0.0", "::"} else effective_host
    typer.echo(
        f"Starting LandTrack on {effective_host}:{effective_port}.\n"
        f"API available at http://{browser_host}:{effective_port}/docs"
    )
    uvicorn.run(
        "landtrack.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
    )


@cli.command()
def summary() -> None:
    """Print dashboard totals and the per-land comparison."""

    with _open_store() as store:
        dashboard = AggregationEngine(store).summary()
    stats = dashboard.stats
    typer.echo(f"Lands: {stats.total_lands}  Farmers: {stats.total_farmers}")
    typer.echo(f"Total expenses: Rs. {stats.total_expenses:,.2f}")
    typer.echo(f"Total income:   Rs. {stats.total_income:,.2f}")
    for row in dashboard.lands:
        typer.echo(
            f"  {row.name}: income {row.income:,.2f} expenses {row.expenses:,.2f} "
            f"profit {row.profit:,.2f}"
        )
    for category, amount in dashboard.categories.items():
        typer.echo(f"  [{category.value}] {amount:,.2f}")


@cli.command()
def settle(
    land_id: str = typer.Argument(..., help="Identifier of the land to settle."),
    crop_income: float = typer.Argument(..., help="Total crop income for the season."),
) -> None:
    """Settle a land and record the entered crop income."""

    with _open_store() as store:
        try:
            result = SettlementCalculator(store).calculate_settlement(land_id, crop_income)
        except NotFound as error:
            typer.echo(error.message, err=True)
            raise typer.Exit(code=1) from error
        except ValueError as error:
            typer.echo(str(error), err=True)
            raise typer.Exit(code=2) from error

    typer.echo(f"Land: {result.land.name} ({result.land.location})")
    typer.echo(f"Farmer: {result.farmer.name if result.farmer else 'unassigned'}")
    typer.echo(f"Net profit:            Rs. {result.net_profit:,.2f}")
    typer.echo(f"Landlord share (75%):  Rs. {result.landlord_share:,.2f}")
    typer.echo(f"Farmer gross (25%):    Rs. {result.farmer_gross_share:,.2f}")
    typer.echo(f"Less expense share:    Rs. {result.farmer_expense_share:,.2f}")
    typer.echo(f"Less lend:             Rs. {result.farmer_lend_deduction:,.2f}")
    typer.echo(f"Farmer net:            Rs. {result.farmer_net_profit:,.2f}")
    if result.farmer_owes:
        typer.echo(f"Farmer owes:           Rs. {result.farmer_owes:,.2f}")


if __name__ == "__main__":
    cli()
