"""Formatting utilities for display."""

from datetime import datetime

from nightscope.weather.base import KST


def get_score_color(score: float) -> str:
    """Get Rich color for score value.

    Args:
        score: Score value 0-100

    Returns:
        Rich color name
    """
    if score >= 80:
        return "bright_green"
    elif score >= 60:
        return "green"
    elif score >= 40:
        return "yellow"
    elif score >= 20:
        return "orange1"
    else:
        return "red"


def format_score(score: float) -> str:
    """Format score with color markup for Rich."""
    color = get_score_color(score)
    return f"[{color}]{score:.0f}[/{color}]"


def format_score_bar(score: float, width: int = 10) -> str:
    """Format score as a progress bar.

    Args:
        score: Score value 0-100
        width: Bar width in characters

    Returns:
        Unicode progress bar string
    """
    filled = int(score / 100 * width)
    empty = width - filled
    color = get_score_color(score)

    bar = "█" * filled + "░" * empty
    return f"[{color}]{bar}[/{color}]"


def format_stars(stars: float) -> str:
    """Render a 0-5 half-step rating as stars."""
    full = int(stars)
    half = stars - full >= 0.5
    return "★" * full + ("½" if half else "") + "☆" * (5 - full - (1 if half else 0))


def format_time(dt: datetime | None) -> str:
    """Format a time in Korea Standard Time, or a dash if unknown."""
    if dt is None:
        return "-"
    return dt.astimezone(KST).strftime("%m-%d %H:%M KST")


def format_coordinates(lat: float, lng: float) -> str:
    """Format coordinates for display.

    Returns:
        Formatted string like "37.57°N, 126.98°E"
    """
    lat_dir = "N" if lat >= 0 else "S"
    lng_dir = "E" if lng >= 0 else "W"
    return f"{abs(lat):.2f}°{lat_dir}, {abs(lng):.2f}°{lng_dir}"


def format_optional(value: float | None, unit: str = "", precision: int = 0) -> str:
    """Format a possibly-unknown number with a unit."""
    if value is None:
        return "-"
    return f"{value:.{precision}f}{unit}"


def format_altitude(altitude: float) -> str:
    """Format altitude with quality indicator."""
    if altitude > 30:
        return f"[green]{altitude:.0f}°[/green]"
    elif altitude > 0:
        return f"[yellow]{altitude:.0f}°[/yellow]"
    else:
        return f"[dim]{altitude:.0f}° (below horizon)[/dim]"
