"""Spoolman-compatible HTTP API backed by an InvenTree inventory."""

__version__ = "0.1.0"

__all__ = ["__version__"]