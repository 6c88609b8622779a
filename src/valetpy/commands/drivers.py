"""Command: list registered drivers in check order."""

from __future__ import annotations

import click

from valetpy.commands._base import ValetCommand
from valetpy.commands._context import AppContext
from valetpy.services.sites import SiteService


@click.command(
    cls=ValetCommand,
    examples="""\
  # Show built-in, extension and plugin drivers
  valetpy drivers

  # Include drivers from a different home directory
  valetpy --home ~/dotfiles/valet drivers""",
)
@click.pass_obj
def drivers(app: AppContext) -> None:
    """List drivers in the order they are checked.

    Project-local drivers (valet_driver.py) are not listed; they are
    checked right after the built-in framework drivers.
    """
    app.emit(SiteService(app.settings, app.registry).drivers())
