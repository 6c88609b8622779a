"""Command: dry-run the dispatcher for a host and URI."""

from __future__ import annotations

import click

from valetpy.commands._base import ValetCommand
from valetpy.commands._context import AppContext
from valetpy.services.sites import SiteService


@click.command(
    cls=ValetCommand,
    examples="""\
  # Which project and front controller handle blog.test?
  valetpy which blog.test

  # Is /css/app.css served as a static file?
  valetpy which blog.test /css/app.css

  # Machine-readable output
  valetpy --json which blog.test /index.php""",
)
@click.argument("host")
@click.argument("uri", default="/")
@click.pass_obj
def which(app: AppContext, host: str, uri: str) -> None:
    """Dry-run the dispatcher for HOST and URI without executing anything."""
    app.emit(SiteService(app.settings, app.registry).which(host, uri))
