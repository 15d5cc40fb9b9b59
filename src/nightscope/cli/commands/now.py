"""Current conditions command."""

import asyncio

import click

from nightscope.cli.context import CliContext
from nightscope.core.exceptions import NightscopeError
from nightscope.scoring.models import ScoringScheme

pass_context = click.make_pass_decorator(CliContext)


@click.command()
@click.option("--location", "-l", type=str, help="Saved location name")
@click.option("--lat", type=float, help="Latitude in degrees")
@click.option("--lng", type=float, help="Longitude in degrees")
@click.option(
    "--scheme",
    type=click.Choice([s.value for s in ScoringScheme]),
    default=ScoringScheme.LOCATION_ONLY.value,
    show_default=True,
    help="Composite weighting",
)
@pass_context
def now(
    ctx: CliContext,
    location: str | None,
    lat: float | None,
    lng: float | None,
    scheme: str,
) -> None:
    """Score current conditions from live observations.

    Refreshes the point observation and satellite cloud feeds once and
    scores the location.

    Examples:
        nightscope now
        nightscope now --lat 37.37 --lng 128.39 --scheme forecast_weighted
    """
    asyncio.run(_now_async(ctx, location, lat, lng, ScoringScheme(scheme)))


async def _now_async(
    ctx: CliContext,
    location_name: str | None,
    lat: float | None,
    lng: float | None,
    scheme: ScoringScheme,
) -> None:
    """Async implementation of now command."""
    try:
        point = ctx.resolve_location(location_name, lat, lng)
        service = ctx.get_service()

        with ctx.console.status("Fetching conditions..."):
            refreshed = await service.force_refresh_all()
            report = await service.realtime_score(point.lat, point.lng, scheme=scheme)

        for kind, ok in refreshed.items():
            if not ok:
                ctx.renderer.print_warning(f"{kind.value} feed unavailable, using neutral values")

        ctx.renderer.render_report(report, "CURRENT OBSERVATION CONDITIONS")

    except NightscopeError as e:
        ctx.renderer.print_error(str(e))
        raise SystemExit(1)
    finally:
        await ctx.cleanup()
