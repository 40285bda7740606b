"""Household net-worth projection and financial-independence planning engine."""

from .engine import run_monte_carlo, run_projection, validate

__all__ = ["run_monte_carlo", "run_projection", "validate"]
