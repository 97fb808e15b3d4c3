"""Command-line interface for Beacon Inspector."""

from .main import app

__all__ = ["app"]
