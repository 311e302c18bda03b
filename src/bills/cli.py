"""Command-line interface for electricity bill estimation."""

import json
import logging
import os
from pathlib import Path

import click
import httpx
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .diagnostics import Diagnostics
from .errors import BillEstimatorError
from .estimator import BillEstimator
from .tariffs import DEFAULT_PRICING_PATH, fetch_pricing_document

console = Console()


def get_pricing_path(pricing: str | None = None) -> Path:
    """Find the provider pricing document.

    Checks the --pricing option, then BILLS_PRICING_FILE, then the usual
    config locations, falling back to the bundled catalog.
    """
    if pricing:
        return Path(pricing)
    env_path = os.environ.get("BILLS_PRICING_FILE")
    if env_path:
        return Path(env_path)

    candidates = [
        Path.cwd() / "config" / "provider_pricing.yaml",
        Path.home() / ".config" / "bill-estimator" / "provider_pricing.yaml",
    ]
    for path in candidates:
        if path.exists():
            return path
    return DEFAULT_PRICING_PATH


def read_pricing_document(pricing: str | None, pricing_url: str | None) -> str:
    """Return pricing YAML from a URL if given, otherwise from disk."""
    url = pricing_url or (None if pricing else os.environ.get("BILLS_PRICING_URL"))
    if url:
        return fetch_pricing_document(url)
    return get_pricing_path(pricing).read_text(encoding="utf-8")


def pricing_options(f):
    """Shared --pricing / --pricing-url options."""
    f = click.option(
        "--pricing-url", help="Fetch the pricing YAML from a URL (or set BILLS_PRICING_URL)"
    )(f)
    f = click.option(
        "--pricing",
        type=click.Path(exists=True, dir_okay=False),
        help="Path to provider pricing YAML (or set BILLS_PRICING_FILE)",
    )(f)
    return f


def build_estimator(pricing: str | None, pricing_url: str | None) -> BillEstimator:
    try:
        document = read_pricing_document(pricing, pricing_url)
        return BillEstimator.create(document, Diagnostics())
    except httpx.HTTPError as e:
        console.print(f"[red]Failed to fetch pricing document: {e}[/red]")
        raise SystemExit(1)
    except BillEstimatorError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Show debug diagnostics")
def cli(verbose):
    """Estimate annual electricity bills from smart-meter interval data."""
    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@cli.command()
@click.argument("csv_path", type=click.Path(exists=True, dir_okay=False))
@pricing_options
@click.option("--no-interpolate", is_flag=True, help="Don't fill missing half-hour slots")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--diagnostics", "show_diagnostics", is_flag=True, help="Summarise diagnostics")
def estimate(csv_path, pricing, pricing_url, no_interpolate, as_json, show_diagnostics):
    """Estimate the annual bill for each provider from a meter CSV export."""
    estimator = build_estimator(pricing, pricing_url)
    csv_text = Path(csv_path).read_text(encoding="utf-8-sig")

    try:
        bills = estimator.with_consumption(csv_text).estimate(interpolate=not no_interpolate)
    except BillEstimatorError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)

    if as_json:
        click.echo(json.dumps({name: b.to_dict() for name, b in bills.items()}, indent=2))
    else:
        table = Table(title="Estimated Annual Bills")
        table.add_column("Provider", style="cyan")
        table.add_column("Total", justify="right", style="bold")
        table.add_column("Consumption", justify="right")
        table.add_column("Standing", justify="right")
        table.add_column("Export Credit", justify="right", style="green")
        table.add_column("Rates (kWh, %)")

        for name, bill in sorted(bills.items(), key=lambda item: item[1].total):
            rates = "\n".join(
                f"{price}: {bucket.consumption:.0f} kWh ({bucket.percentage:.1f}%)"
                for price, bucket in sorted(bill.breakdown.items())
            )
            if bill.unpriced_consumption:
                rates += f"\n[yellow]unpriced: {bill.unpriced_consumption:.0f} kWh[/yellow]"
            table.add_row(
                name,
                f"{bill.total:.2f}",
                f"{bill.consumption_charge:.2f}",
                f"{bill.standing_charge:.2f}",
                f"{bill.export_reduction:.2f}",
                rates,
            )
        console.print(table)

    if show_diagnostics:
        counts = estimator.diagnostics.counts()
        if not counts:
            console.print("[green]No diagnostics[/green]")
        for kind, count in sorted(counts.items()):
            console.print(f"[yellow]{kind}: {count}[/yellow]")


@cli.command()
@pricing_options
def providers(pricing, pricing_url):
    """List provider plans and their rate bands."""
    estimator = build_estimator(pricing, pricing_url)

    table = Table(title="Provider Plans")
    table.add_column("Provider", style="cyan")
    table.add_column("Standing", justify="right")
    table.add_column("Import Rates")
    table.add_column("Export Rates", style="dim")

    for plan in estimator.plans.values():
        table.add_row(
            plan.name,
            f"{plan.standing_charge:.2f}",
            "\n".join(f"{b.start_time}-{b.end_time}: {b.price_per_kwh}" for b in plan.import_rates),
            "\n".join(f"{b.start_time}-{b.end_time}: {b.price_per_kwh}" for b in plan.export_rates)
            or "-",
        )

    console.print(table)


@cli.command()
@click.argument("provider")
@click.argument("rate", type=float)
@pricing_options
def periods(provider, rate, pricing, pricing_url):
    """Show the time bands a provider bills at RATE."""
    estimator = build_estimator(pricing, pricing_url)
    bands = estimator.time_periods_for_rate(provider, rate)

    if provider not in estimator.plans:
        console.print(f'[red]Provider "{provider}" not found[/red]')
        raise SystemExit(1)
    if not bands:
        console.print(f"[yellow]No time periods found for rate {rate}[/yellow]")
        return

    for band in bands:
        console.print(f"{band.start_time} - {band.end_time}")


if __name__ == "__main__":
    cli()
