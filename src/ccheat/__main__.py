"""Allow running as `python -m ccheat`."""

from ccheat.cli import app

app()
