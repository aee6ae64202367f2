"""Schema migrations for the encounter log store."""

__version__ = "0.4.0"
