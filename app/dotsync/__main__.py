"""Allow ``python -m dotsync``."""

from dotsync.cli.main import app

app()
