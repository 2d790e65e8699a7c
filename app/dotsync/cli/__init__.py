"""CLI package for dotsync.

This package contains the Typer application and result display helpers.
"""

from dotsync.cli.main import app

__all__ = ["app"]
