"""Markets subcommand: list, show."""

from __future__ import annotations

import typer

from predictx.catalog.generator import get_category
from predictx.exchange import Exchange
from predictx.metrics.trend import sparkline

app = typer.Typer(help="Inspect a freshly seeded market catalog")


@app.command("list")
def list_markets(
    ctx: typer.Context,
    cat: str | None = typer.Option(None, "--cat", help="Category id (crypto, economy, ...) or 'all'"),
    query: str | None = typer.Option(None, "--query", "-q", help="Title search"),
    limit: int = typer.Option(20, "--limit", "-n", help="Max rows"),
) -> None:
    """List markets from the catalog the configured seed produces."""
    if cat and cat != "all" and get_category(cat) is None:
        typer.echo(f"Unknown category: {cat}")
        raise typer.Exit(1)
    exchange = Exchange.from_settings(ctx.obj["settings"])
    total, rows = exchange.list_markets(category=cat, query=query, limit=limit)
    for m in rows:
        typer.echo(f"  {m.id:>4}  {m.category:<13} YES {m.yes_price:>2}¢  NO {m.no_price:>2}¢  {m.title[:60]}")
    typer.echo(f"Total: {total} markets")


@app.command("show")
def show(
    ctx: typer.Context,
    market_id: int = typer.Argument(..., help="Market id"),
    ticks: int = typer.Option(0, "--ticks", "-t", help="Advance the price process this many ticks first"),
) -> None:
    """Show one market with its price history."""
    exchange = Exchange.from_settings(ctx.obj["settings"])
    if exchange.store.get_market(market_id) is None:
        typer.echo(f"Market not found: {market_id}")
        raise typer.Exit(1)
    exchange.prices.run_ticks(ticks)
    snap = exchange.market_snapshot(market_id)
    trend = exchange.market_trend(market_id)
    typer.echo(f"#{snap.id} [{snap.category_name}] {snap.title}")
    typer.echo(f"YES {snap.yes_price}¢  NO {snap.no_price}¢  Volume {snap.volume:,.0f}  Traders {snap.participants}")
    typer.echo(f"Resolves in {snap.days} days")
    typer.echo(f"History {sparkline(snap.history)}  change {trend.change:+d}¢ ({trend.direction})")
