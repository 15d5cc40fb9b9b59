"""Observation score calculation engine."""

import logging
import math

from nightscope.core.utils import clamp
from nightscope.scoring.components import (
    NEUTRAL_SCORE,
    calculate_cloud_score,
    calculate_humidity_proxy_score,
    calculate_moon_score,
    calculate_transparency_score,
)
from nightscope.scoring.light_pollution import calculate_light_pollution_score
from nightscope.scoring.models import (
    GeometryInputs,
    Grade,
    ObservationScore,
    ScoringScheme,
    WeatherInputs,
)

logger = logging.getLogger(__name__)

# Grade floors, checked from the top
GRADE_THRESHOLDS = (
    (80.0, Grade.EXCELLENT),
    (60.0, Grade.GOOD),
    (40.0, Grade.FAIR),
    (20.0, Grade.POOR),
)


def grade_for(index: float) -> Grade:
    """Map a composite index to its grade."""
    for floor, grade in GRADE_THRESHOLDS:
        if index >= floor:
            return grade
    return Grade.UNOBSERVABLE


def _bounded(value: float) -> float:
    if not math.isfinite(value):
        return NEUTRAL_SCORE
    return clamp(value, 0, 100)


class ObservationScorer:
    """Combines weather and celestial geometry into a graded index."""

    # Component weights per scheme (each sums to 1.0)
    WEIGHTS = {
        ScoringScheme.FORECAST_WEIGHTED: {
            "cloud": 0.40,
            "moon": 0.25,
            "light_pollution": 0.20,
            "transparency": 0.15,
        },
        ScoringScheme.LOCATION_ONLY: {
            "light_pollution": 0.40,
            "cloud": 0.40,
            "humidity": 0.20,
        },
    }

    def score(
        self,
        weather: WeatherInputs | None = None,
        geometry: GeometryInputs | None = None,
        scheme: ScoringScheme = ScoringScheme.FORECAST_WEIGHTED,
    ) -> ObservationScore:
        """Calculate the observation score.

        Missing inputs fall back to neutral subscores, so this always
        returns a complete score.

        Args:
            weather: Weather values
            geometry: Moon geometry and observing site
            scheme: Which weighting to apply

        Returns:
            ObservationScore with every subscore filled in
        """
        weather = weather or WeatherInputs()
        geometry = geometry or GeometryInputs()
        location = geometry.location

        components = {
            "cloud": calculate_cloud_score(weather.cloud_cover_pct, weather.sky_condition),
            "transparency": calculate_transparency_score(
                weather.humidity_pct,
                visibility_m=weather.visibility_m,
                wind_speed_ms=weather.wind_speed_ms,
                precipitation_probability_pct=weather.precipitation_probability_pct,
            ),
            "moon": calculate_moon_score(
                geometry.moon_illumination_pct, geometry.moon_altitude_deg
            ),
            "light_pollution": calculate_light_pollution_score(
                location.lat if location else None,
                location.lng if location else None,
            ),
            "humidity": calculate_humidity_proxy_score(
                weather.temperature_c, weather.humidity_pct
            ),
        }
        components = {key: _bounded(value) for key, value in components.items()}

        weights = self.WEIGHTS[scheme]
        index = sum(components[key] * weight for key, weight in weights.items())
        index = clamp(round(index, 1), 0, 100)

        logger.debug(f"Score {index} ({scheme.value}) from {components}")

        return ObservationScore(
            cloud_score=components["cloud"],
            transparency_score=components["transparency"],
            moon_score=components["moon"],
            light_pollution_score=components["light_pollution"],
            humidity_score=components["humidity"],
            composite_index=index,
            grade=grade_for(index),
            scheme=scheme,
        )

    def get_recommendations(
        self,
        score: ObservationScore,
        weather: WeatherInputs | None = None,
        geometry: GeometryInputs | None = None,
    ) -> list[str]:
        """Get recommendations based on score and conditions.

        Args:
            score: Calculated observation score
            weather: Weather values the score was computed from
            geometry: Geometry values the score was computed from

        Returns:
            List of recommendation strings
        """
        weather = weather or WeatherInputs()
        geometry = geometry or GeometryInputs()
        recommendations = [score.summary]

        if score.cloud_score < 50 and weather.cloud_cover_pct is not None:
            recommendations.append(
                f"Cloud cover at {weather.cloud_cover_pct:.0f}% may hide the Milky Way. "
                "Check the satellite grid for clearing."
            )

        if score.scheme == ScoringScheme.FORECAST_WEIGHTED and score.moon_score < 50:
            recommendations.append(
                "Bright Moon above the horizon. Wait for moonset or pick a darker night."
            )

        if score.transparency_score < 50:
            recommendations.append(
                "Hazy air expected. Faint structure in the Milky Way will be hard to see."
            )

        if score.light_pollution_score <= 30:
            recommendations.append(
                "City sky glow is strong here. Drive to a rural site for better contrast."
            )

        if weather.humidity_pct is not None and weather.humidity_pct > 85:
            recommendations.append("High humidity. Watch for dew on lenses.")

        if geometry.moon_altitude_deg is not None and geometry.moon_altitude_deg < 0:
            if score.grade >= Grade.GOOD:
                recommendations.append("The Moon is down. A good window for long exposures.")

        return recommendations
