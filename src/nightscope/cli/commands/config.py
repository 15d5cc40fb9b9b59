"""Configuration command."""

import click
from rich.table import Table

from nightscope.cli.context import CliContext
from nightscope.core.exceptions import ConfigError
from nightscope.storage.config import AUTH_KEY_ENV, DEFAULT_SETTINGS

pass_context = click.make_pass_decorator(CliContext)

SETTING_TYPES = {
    "auth_key": str,
    "point_refresh_minutes": int,
    "cloud_refresh_minutes": int,
    "fetch_timeout_seconds": float,
    "default_latitude": float,
    "default_longitude": float,
    "ephemeris_dir": str,
}


@click.group()
def config() -> None:
    """Manage configuration and locations."""
    pass


@config.command("show")
@pass_context
def show_config(ctx: CliContext) -> None:
    """Show current configuration."""
    ctx.console.print(f"[bold]Configuration Directory:[/bold] {ctx.config.config_dir}")
    ctx.console.print(f"[bold]Ephemeris Directory:[/bold] {ctx.config.ephemeris_dir}")
    ctx.console.print()

    default_loc = ctx.config.get_default_location()
    if default_loc:
        name, point = default_loc
        ctx.console.print(f"[bold]Default Location:[/bold] {name} ({point})")
    else:
        ctx.console.print(
            f"[yellow]No default location set[/yellow] (using {ctx.config.default_point})"
        )

    ctx.console.print()
    ctx.console.print("[bold]Settings:[/bold]")
    for key, value in ctx.config.all_settings().items():
        if key == "auth_key":
            value = "***" if value else "(unset)"
        ctx.console.print(f"  {key}: {value}")
    if "auth_key" not in ctx.config.all_settings():
        source = f"from {AUTH_KEY_ENV}" if ctx.config.auth_key else "(unset)"
        ctx.console.print(f"  auth_key: {source}")


@config.command("set")
@click.argument("key", type=click.Choice(sorted(SETTING_TYPES)))
@click.argument("value")
@pass_context
def set_setting(ctx: CliContext, key: str, value: str) -> None:
    """Set a setting.

    Example: nightscope config set cloud_refresh_minutes 15
    """
    try:
        converted = SETTING_TYPES[key](value)
    except ValueError:
        ctx.renderer.print_error(f"Invalid value for {key}: {value!r}")
        raise SystemExit(1)

    ctx.config.set_setting(key, converted)
    shown = "***" if key == "auth_key" else converted
    ctx.renderer.print_success(f"{key} = {shown}")
    if key in DEFAULT_SETTINGS and converted == DEFAULT_SETTINGS[key]:
        ctx.console.print("[dim](same as the built-in default)[/dim]")


@config.group("location")
def location() -> None:
    """Manage saved locations."""
    pass


@location.command("add")
@click.option("--lat", type=float, required=True, help="Latitude in degrees")
@click.option("--lng", type=float, required=True, help="Longitude in degrees")
@click.option("--name", type=str, required=True, help="Location name")
@click.option("--default", "make_default", is_flag=True, help="Make it the default location")
@pass_context
def add_location(
    ctx: CliContext,
    lat: float,
    lng: float,
    name: str,
    make_default: bool,
) -> None:
    """Save a location.

    Example: nightscope config location add --lat 37.37 --lng 128.39 --name anbandegi
    """
    try:
        point = ctx.config.add_location(name, lat, lng, set_default=make_default)
    except ConfigError as e:
        ctx.renderer.print_error(str(e))
        raise SystemExit(1)
    ctx.renderer.print_success(f"Location '{name}' saved at {point}")


@location.command("list")
@pass_context
def list_locations(ctx: CliContext) -> None:
    """List all saved locations."""
    locations = ctx.config.get_all_locations()
    default_loc = ctx.config.get_default_location()
    default_name = default_loc[0] if default_loc else None

    if not locations:
        ctx.renderer.print_warning("No locations configured.")
        ctx.console.print("Use 'nightscope config location add' to add a location.")
        return

    table = Table(title="Saved Locations")
    table.add_column("Name", style="cyan")
    table.add_column("Latitude")
    table.add_column("Longitude")
    table.add_column("Default", justify="center")

    for name, point in locations.items():
        table.add_row(
            name,
            f"{point.lat:.4f}",
            f"{point.lng:.4f}",
            "✓" if name == default_name else "",
        )

    ctx.console.print(table)


@location.command("remove")
@click.argument("name")
@pass_context
def remove_location(ctx: CliContext, name: str) -> None:
    """Remove a saved location."""
    if ctx.config.remove_location(name):
        ctx.renderer.print_success(f"Location '{name}' removed")
    else:
        ctx.renderer.print_error(f"Location '{name}' not found")
        raise SystemExit(1)


@location.command("default")
@click.argument("name")
@pass_context
def set_default(ctx: CliContext, name: str) -> None:
    """Set the default location."""
    try:
        ctx.config.set_default_location(name)
        ctx.renderer.print_success(f"Default location set to '{name}'")
    except ConfigError as e:
        ctx.renderer.print_error(str(e))
        raise SystemExit(1)
