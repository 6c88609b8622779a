"""Command: list configured root paths and the sites they contain."""

from __future__ import annotations

import click

from valetpy.commands._base import ValetCommand
from valetpy.commands._context import AppContext
from valetpy.services.sites import SiteService


@click.command(
    cls=ValetCommand,
    examples="""\
  # Show every parked directory and its sites
  valetpy paths

  # Use an alternative config store
  valetpy -c ./config.json paths""",
)
@click.pass_obj
def paths(app: AppContext) -> None:
    """List configured root paths and the site directories inside them."""
    app.emit(SiteService(app.settings, app.registry).paths())
