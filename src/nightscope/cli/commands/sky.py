"""Celestial geometry command."""

from datetime import datetime

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
    "--at",
    "at",
    type=click.DateTime(formats=["%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M"]),
    help="Local (KST) time to evaluate (default: now)",
)
@pass_context
def sky(
    ctx: CliContext,
    location: str | None,
    lat: float | None,
    lng: float | None,
    at: datetime | None,
) -> None:
    """Show Moon, galactic center and twilight for a location.

    No API key is needed.

    Examples:
        nightscope sky
        nightscope sky --lat 37.37 --lng 128.39 --at "2025-05-28 23:00"
    """
    try:
        point = ctx.resolve_location(location, lat, lng)
    except NightscopeError as e:
        ctx.renderer.print_error(str(e))
        raise SystemExit(1)
    when = at.replace(tzinfo=KST) if at else utc_now()

    with ctx.console.status("Computing sky geometry..."):
        geometry = ctx.get_calculator().get_geometry(point, when)

    ctx.renderer.render_geometry(geometry)
