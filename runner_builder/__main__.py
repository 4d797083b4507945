"""Allow running as ``python -m runner_builder``."""

from runner_builder.cli import app

app()
