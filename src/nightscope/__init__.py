"""Nightscope - Milky Way observation conditions engine."""

__version__ = "0.1.0"
