"""Main CLI entry point."""

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from nightscope import __version__
from nightscope.cli.context import CliContext
from nightscope.core.exceptions import NightscopeError


def setup_logging(verbose: bool) -> None:
    """Route log records through Rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.group()
@click.option(
    "--config-dir",
    type=click.Path(path_type=Path),
    help="Custom configuration directory",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.version_option(version=__version__, prog_name="nightscope")
@click.pass_context
def cli(ctx: click.Context, config_dir: Path | None, verbose: bool) -> None:
    """Nightscope - Milky Way observation conditions for South Korea.

    Combines Moon and galactic-center geometry, KMA weather feeds and
    light pollution into a single observation index.
    """
    setup_logging(verbose)
    ctx.obj = CliContext.create(config_dir=config_dir, verbose=verbose)


# Import and register commands
from nightscope.cli.commands import config, forecast, grid, now, sky, watch

cli.add_command(config.config)
cli.add_command(grid.grid)
cli.add_command(sky.sky)
cli.add_command(now.now)
cli.add_command(forecast.forecast)
cli.add_command(watch.watch)


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except NightscopeError as e:
        console = Console()
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)
    except KeyboardInterrupt:
        raise SystemExit(0)


if __name__ == "__main__":
    main()
