"""`predictx` command: global options, then the api/markets/sim/tui command groups."""

from pathlib import Path

import typer

from predictx import __version__
from predictx.config import configure_logging, get_settings

app = typer.Typer(
    name="predictx",
    help=(
        "PredictX - simulated prediction-market exchange. Serve the trading API, "
        "browse the seeded catalog, run bot load simulations or watch the live dashboard."
    ),
    no_args_is_help=True,
)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(f"predictx {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Path | None = typer.Option(
        None, "--config-dir", "-C", help="Directory holding default.toml and profile overlays"
    ),
    profile: str | None = typer.Option(
        None, "--profile", "-p", help="Overlay config/<profile>.toml, e.g. dev for a small seeded catalog"
    ),
    log_format: str | None = typer.Option(
        None, "--log-format", help="Override [logging] format: console or json"
    ),
    version: bool = typer.Option(
        False, "--version", callback=_show_version, is_eager=True, help="Print the version and exit"
    ),
) -> None:
    """Load settings once; every subcommand reads them from ctx.obj."""
    settings = get_settings(profile, config_dir)
    if log_format:
        settings.logging["format"] = log_format
    configure_logging(settings)
    ctx.obj = {"settings": settings, "config_dir": config_dir, "profile": profile}


from predictx.cli import api_cmd, markets, sim, tui_cmd  # noqa: E402

app.add_typer(api_cmd.app, name="api")
app.add_typer(markets.app, name="markets")
app.add_typer(sim.app, name="sim")
app.add_typer(tui_cmd.app, name="tui")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
