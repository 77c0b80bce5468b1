"""Root CLI app - entry point and command registration."""

from pathlib import Path

import typer

from orderflow.config import get_settings
from orderflow.config.settings import configure_logging

app = typer.Typer(
    name="oflow",
    help="Orderflow - prediction market trade logs: wallet PnL, price levels, price history.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Path | None = typer.Option(
        None, "--config-dir", "-C", help="Config directory (default: ./config or package config)"
    ),
    profile: str | None = typer.Option(
        None, "--profile", "-p", help="Config profile (e.g. dev) to overlay on default.toml"
    ),
    data_dir: Path | None = typer.Option(
        None, "--data-dir", "-d", help="Trade data root (overrides storage.data_dir)"
    ),
) -> None:
    """Configure logging and store options in context."""
    settings = get_settings(profile, config_dir)
    if data_dir is not None:
        settings.storage["data_dir"] = str(data_dir)
    configure_logging(settings)
    ctx.obj = {"settings": settings, "config_dir": config_dir, "profile": profile}


# Subcommands registered from other modules
from orderflow.cli import analyze, api_cmd, log  # noqa: E402

app.add_typer(analyze.app, name="analyze")
app.add_typer(log.app, name="log")
app.add_typer(api_cmd.app, name="api")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
