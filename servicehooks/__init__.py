"""Service hooks: receive source-control platform events and dispatch them to services."""

__version__ = "0.1.0"
