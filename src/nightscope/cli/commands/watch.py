"""Watch mode command - live monitoring."""

import asyncio

import click

from nightscope.cli.context import CliContext
from nightscope.core.exceptions import NightscopeError
from nightscope.geo.models import GeoPoint
from nightscope.scoring.models import ScoringScheme

pass_context = click.make_pass_decorator(CliContext)


@click.command()
@click.option(
    "--location", "-l",
    "names",
    type=str,
    multiple=True,
    help="Saved location name (repeatable; default: the default location)",
)
@click.option(
    "--interval", "-i",
    type=int,
    default=5,
    show_default=True,
    help="Display interval in minutes",
)
@pass_context
def watch(ctx: CliContext, names: tuple[str, ...], interval: int) -> None:
    """Live monitoring of observation conditions.

    Starts background refresh of the weather feeds and prints the
    real-time index for each location periodically. Press Ctrl+C to stop.

    Examples:
        nightscope watch
        nightscope watch -l home -l dark-site --interval 10
    """
    try:
        asyncio.run(_watch_async(ctx, names, interval))
    except KeyboardInterrupt:
        ctx.console.print("\n[yellow]Watch mode stopped[/yellow]")


async def _watch_async(
    ctx: CliContext,
    names: tuple[str, ...],
    interval: int,
) -> None:
    """Async implementation of watch command."""
    try:
        if names:
            points: dict[str, GeoPoint] = {name: ctx.resolve_location(name) for name in names}
        else:
            points = {"default": ctx.resolve_location()}

        service = ctx.get_service()
        service.start()

        ctx.console.print(
            f"[bold]Watch Mode[/bold] - {', '.join(points)}\n"
            f"Point feed every {ctx.config.point_refresh_seconds / 60:.0f} min, "
            f"cloud grid every {ctx.config.cloud_refresh_seconds / 60:.0f} min. "
            "Press Ctrl+C to stop.\n"
        )

        while True:
            for name, point in points.items():
                try:
                    report = await service.realtime_score(
                        point.lat, point.lng, scheme=ScoringScheme.LOCATION_ONLY
                    )
                    ctx.renderer.render_watch_line(report, name)
                except NightscopeError as e:
                    ctx.renderer.print_warning(f"Update for {name} failed: {e}")

            await asyncio.sleep(interval * 60)

    except NightscopeError as e:
        ctx.renderer.print_error(str(e))
        raise SystemExit(1)
    finally:
        await ctx.cleanup()
