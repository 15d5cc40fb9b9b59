"""Forecast command."""

import asyncio
from datetime import date, datetime, timedelta

import click

from nightscope.cli.context import CliContext
from nightscope.core.exceptions import NightscopeError
from nightscope.core.utils import utc_now
from nightscope.weather.base import KST

pass_context = click.make_pass_decorator(CliContext)


@click.command()
@click.option("--location", "-l", type=str, help="Saved location name")
@click.option("--lat", type=float, help="Latitude in degrees")
@click.option("--lng", type=float, help="Longitude in degrees")
@click.option(
    "--date", "-d",
    "night",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Night to score (default: tonight)",
)
@click.option(
    "--days",
    type=click.IntRange(1, 3),
    default=1,
    show_default=True,
    help="Number of consecutive nights",
)
@pass_context
def forecast(
    ctx: CliContext,
    location: str | None,
    lat: float | None,
    lng: float | None,
    night: datetime | None,
    days: int,
) -> None:
    """Score upcoming nights from the KMA short-range forecast.

    The short-range forecast covers about three days ahead.

    Examples:
        nightscope forecast
        nightscope forecast --date 2025-05-28 --lat 37.37 --lng 128.39
        nightscope forecast --days 3
    """
    start = night.date() if night else utc_now().astimezone(KST).date()
    asyncio.run(_forecast_async(ctx, location, lat, lng, start, days))


async def _forecast_async(
    ctx: CliContext,
    location_name: str | None,
    lat: float | None,
    lng: float | None,
    start: date,
    days: int,
) -> None:
    """Async implementation of forecast command."""
    try:
        point = ctx.resolve_location(location_name, lat, lng)
        service = ctx.get_service()

        for offset in range(days):
            target = start + timedelta(days=offset)
            with ctx.console.status(f"Fetching forecast for {target.isoformat()}..."):
                report = await service.forecast_score(point.lat, point.lng, target)
            ctx.renderer.render_report(report, f"NIGHT FORECAST {target.isoformat()}")

    except NightscopeError as e:
        ctx.renderer.print_error(str(e))
        raise SystemExit(1)
    finally:
        await ctx.cleanup()
