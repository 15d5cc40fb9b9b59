"""Rich-based display renderer."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from nightscope.astronomy.models import CelestialGeometry
from nightscope.display.formatters import (
    format_altitude,
    format_coordinates,
    format_optional,
    format_score,
    format_score_bar,
    format_stars,
    format_time,
)
from nightscope.geo.models import GeoPoint, GridCoord
from nightscope.scoring.models import ConditionsReport, WeatherInputs

COMPONENT_NAMES = {
    "cloud": "Cloud Cover",
    "moon": "Moonlight",
    "light_pollution": "Light Pollution",
    "transparency": "Transparency",
    "humidity": "Water Vapor",
}


class DisplayRenderer:
    """Renders observation conditions to the terminal using Rich."""

    def __init__(self, console: Console | None = None):
        """Initialize renderer.

        Args:
            console: Rich console (creates one if not provided)
        """
        self.console = console or Console()

    def render_report(self, report: ConditionsReport, title: str) -> None:
        """Render a scored conditions report.

        Args:
            report: ConditionsReport to display
            title: Header line
        """
        when = (
            report.target_date.isoformat()
            if report.target_date
            else format_time(report.time)
        )
        self.console.print(
            Panel(
                f"[bold]{title}[/bold]\n"
                f"{format_coordinates(report.location.lat, report.location.lng)}\n"
                f"{when}",
                style="blue",
            )
        )

        score = report.score
        self.console.print(
            Panel(
                f"[bold]{format_score(score.composite_index)}[/bold]  "
                f"{format_score_bar(score.composite_index)}  "
                f"[{score.rating_color}]{score.label.upper()}[/{score.rating_color}]  "
                f"{format_stars(score.rating_stars)}",
                title=f"Observation Index ({score.scheme.value})",
                border_style=score.rating_color,
            )
        )

        self._render_components(score.component_scores())
        self._render_weather(report.weather, report.weather_source)
        if report.geometry is not None:
            self.render_geometry(report.geometry, header=False)
        self._render_recommendations(report)

    def _render_components(self, components: dict[str, float]) -> None:
        table = Table(title="Score Breakdown", show_header=False, box=None)
        table.add_column("Component", style="cyan")
        table.add_column("Score", justify="right")
        table.add_column("Bar", width=12)

        for key, value in components.items():
            table.add_row(
                f"├─ {COMPONENT_NAMES.get(key, key)}",
                format_score(value),
                format_score_bar(value),
            )

        self.console.print(table)
        self.console.print()

    def _render_weather(self, weather: WeatherInputs, source: str | None) -> None:
        table = Table(title="Weather", show_header=False, box=None)
        table.add_column("Label", style="dim")
        table.add_column("Value")

        if weather.sky_condition is not None:
            table.add_row("├─ Sky:", weather.sky_condition.value.replace("_", " "))
        table.add_row("├─ Cloud cover:", format_optional(weather.cloud_cover_pct, "%"))
        table.add_row("├─ Humidity:", format_optional(weather.humidity_pct, "%"))
        table.add_row("├─ Temperature:", format_optional(weather.temperature_c, "°C", 1))
        table.add_row("├─ Wind:", format_optional(weather.wind_speed_ms, " m/s", 1))
        if weather.visibility_m is not None:
            table.add_row("├─ Visibility (est.):", f"{weather.visibility_m / 1000:.0f} km")
        if weather.precipitation_probability_pct is not None:
            table.add_row(
                "├─ Precipitation chance:",
                format_optional(weather.precipitation_probability_pct, "%"),
            )
        table.add_row("└─ Source:", source or "[yellow]unavailable[/yellow]")

        self.console.print(table)
        self.console.print()

    def render_geometry(self, geometry: CelestialGeometry, header: bool = True) -> None:
        """Render Moon, galactic center and twilight.

        Args:
            geometry: CelestialGeometry to display
            header: Whether to print a location header first
        """
        if header:
            self.console.print(
                Panel(
                    f"[bold]NIGHT SKY[/bold]\n"
                    f"{format_coordinates(geometry.observer.lat, geometry.observer.lng)}\n"
                    f"{format_time(geometry.time)}",
                    style="blue",
                )
            )

        table = Table(title="Sky", show_header=False, box=None)
        table.add_column("Label", style="dim")
        table.add_column("Value")

        moon = geometry.moon
        if moon is None:
            table.add_row("├─ Moon:", "[yellow]unavailable[/yellow]")
        else:
            table.add_row(
                "├─ Moon:",
                f"{moon.phase_name.value} ({moon.illuminated_fraction_pct:.0f}% lit), "
                f"altitude {format_altitude(moon.altitude_deg)}",
            )
            table.add_row("├─ Moonrise / set:", f"{format_time(moon.rise_time)} / {format_time(moon.set_time)}")

        gc = geometry.galactic_center
        if gc is None:
            table.add_row("├─ Galactic center:", "[yellow]unavailable[/yellow]")
        else:
            state = (
                "[green]up[/green]"
                if geometry.is_galactic_center_visible
                else "[dim]below horizon[/dim]"
            )
            table.add_row(
                "├─ Galactic center:",
                f"{state}, altitude {format_altitude(gc.altitude_deg)}, "
                f"azimuth {gc.azimuth_deg:.0f}°",
            )

        tw = geometry.twilight
        table.add_row("├─ Sunset / sunrise:", f"{format_time(tw.sunset)} / {format_time(tw.sunrise)}")
        table.add_row(
            "└─ Dark window (approx.):",
            f"{format_time(tw.observation_start)} - {format_time(tw.observation_end)}",
        )

        self.console.print(table)
        self.console.print()

    def _render_recommendations(self, report: ConditionsReport) -> None:
        if not report.recommendations:
            return
        self.console.print(
            Panel(
                "\n".join(report.recommendations),
                title="Recommendation",
                border_style=report.score.rating_color,
            )
        )

    def render_grid(self, point: GeoPoint, grid: GridCoord) -> None:
        """Render a coordinate/grid conversion."""
        table = Table(show_header=True)
        table.add_column("Latitude", justify="right")
        table.add_column("Longitude", justify="right")
        table.add_column("nx", justify="right", style="cyan")
        table.add_column("ny", justify="right", style="cyan")
        table.add_row(f"{point.lat:.4f}", f"{point.lng:.4f}", str(grid.nx), str(grid.ny))
        self.console.print(table)

    def render_watch_line(self, report: ConditionsReport, label: str) -> None:
        """Render a one-line update for the watch loop."""
        score = report.score
        self.console.print(
            f"{format_time(report.time)}  {label:<12} "
            f"{format_score(score.composite_index)} "
            f"[{score.rating_color}]{score.label}[/{score.rating_color}]  "
            f"cloud {format_optional(report.weather.cloud_cover_pct, '%')}  "
            f"humidity {format_optional(report.weather.humidity_pct, '%')}"
        )

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[red]Error:[/red] {message}")

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green]✓[/green] {message}")

    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        self.console.print(f"[yellow]Warning:[/yellow] {message}")
