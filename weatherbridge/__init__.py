"""Expose OpenWeatherMap as a small set of text-returning tool operations."""
from __future__ import annotations

__version__ = "1.0.0"
