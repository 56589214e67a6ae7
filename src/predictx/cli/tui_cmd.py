"""TUI dashboard command."""

import typer

from predictx.tui.app import run_tui

app = typer.Typer(help="Launch TUI dashboard")


@app.callback(invoke_without_command=True)
def tui(
    ctx: typer.Context,
    bots: int = typer.Option(0, "--bots", "-b", help="Random-trading bots to populate the leaderboard"),
) -> None:
    """Launch the Textual TUI dashboard (live market board + leaderboard)."""
    if ctx.invoked_subcommand is not None:
        return
    settings = ctx.obj["settings"]
    run_tui(settings, bots=bots)
