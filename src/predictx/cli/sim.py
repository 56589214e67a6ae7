"""Sim subcommand: run bots against an in-memory exchange."""

from __future__ import annotations

import random

import typer

from predictx.exchange import Exchange
from predictx.money import money_display
from predictx.simulation.runner import run_simulation
from predictx.simulation.strategies.momentum import MomentumTrader
from predictx.simulation.strategies.random_trader import RandomTrader

app = typer.Typer(help="Bot load simulation")

STRATEGIES = {"random": RandomTrader, "momentum": MomentumTrader}


@app.command("run")
def run_sim(
    ctx: typer.Context,
    strategy: list[str] = typer.Option(["random", "momentum"], "--strategy", "-s", help="Strategy name (repeatable)"),
    bots: int = typer.Option(5, "--bots", "-b", help="Bots per strategy"),
    ticks: int = typer.Option(100, "--ticks", "-t", help="Price ticks to simulate"),
    workers: int = typer.Option(1, "--workers", "-w", help="Threads placing bot orders concurrently"),
    seed: int | None = typer.Option(None, "--seed", help="Random seed"),
    top: int = typer.Option(10, "--top", help="Leaderboard rows to print"),
) -> None:
    """Run bots for N ticks, then print the leaderboard and the conservation check."""
    unknown = [s for s in strategy if s not in STRATEGIES]
    if unknown:
        typer.echo(f"Unknown strategy: {unknown}. Choose from: {list(STRATEGIES)}")
        raise typer.Exit(1)
    rng = random.Random(seed)
    exchange = Exchange.from_settings(ctx.obj["settings"], rng=rng)
    result = run_simulation(
        exchange,
        [STRATEGIES[s]() for s in strategy],
        bots_per_strategy=bots,
        ticks=ticks,
        workers=workers,
        rng=rng,
    )
    typer.echo(f"Run id: {result.run_id}  Ticks: {result.ticks}")
    typer.echo(f"Buys: {result.buys}  Sells: {result.sells}  Rejected: {result.rejected}")
    typer.echo(f"Ledger consistent: {'yes' if result.consistent else 'NO'}")
    for e in result.leaderboard[:top]:
        typer.echo(f"  #{e.rank:<3} {e.username:<40} {money_display(e.net_worth):>12}  win {e.win_rate:.0%}")
    if not result.consistent:
        raise typer.Exit(2)
