"""Observation score calculation engine."""

from nightscope.scoring.engine import ObservationScorer, grade_for
from nightscope.scoring.models import (
    ConditionsReport,
    GeometryInputs,
    Grade,
    ObservationScore,
    ScoringScheme,
    WeatherInputs,
)

__all__ = [
    "ConditionsReport",
    "GeometryInputs",
    "Grade",
    "ObservationScore",
    "ObservationScorer",
    "ScoringScheme",
    "WeatherInputs",
    "grade_for",
]
