"""Cascading configuration editor for the integration pipeline."""

__version__ = "0.1.0"
