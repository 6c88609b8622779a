"""Allow ``python -m valetpy``."""

from valetpy.cli import cli

cli()
