"""Service layer for orchestrating observation conditions."""

from nightscope.services.conditions import ConditionsService

__all__ = ["ConditionsService"]
