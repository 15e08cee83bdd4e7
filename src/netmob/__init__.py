"""Temporal network points: moving objects constrained to a route network."""

__version__ = "0.1.0"
