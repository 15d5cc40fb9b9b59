"""Grid conversion command."""

import click

from nightscope.cli.context import CliContext
from nightscope.geo.projection import GridProjector

pass_context = click.make_pass_decorator(CliContext)


@click.group()
def grid() -> None:
    """Convert between coordinates and the 5 km forecast grid."""
    pass


@grid.command("to-grid")
@click.argument("lat", type=float)
@click.argument("lng", type=float)
@pass_context
def to_grid(ctx: CliContext, lat: float, lng: float) -> None:
    """Find the forecast grid cell for a latitude/longitude.

    Example: nightscope grid to-grid 37.5665 126.978
    """
    projector = GridProjector()
    cell = projector.to_grid(lat, lng)
    ctx.renderer.render_grid(projector.to_latlng(cell.nx, cell.ny), cell)


@grid.command("to-latlng")
@click.argument("nx", type=int)
@click.argument("ny", type=int)
@pass_context
def to_latlng(ctx: CliContext, nx: int, ny: int) -> None:
    """Find the center of a forecast grid cell.

    Example: nightscope grid to-latlng 60 127
    """
    projector = GridProjector()
    point = projector.to_latlng(nx, ny)
    ctx.renderer.render_grid(point, projector.to_grid(point.lat, point.lng))
