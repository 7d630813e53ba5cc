"""Simulation configuration."""

from . import nbody

__all__ = ["nbody"]
