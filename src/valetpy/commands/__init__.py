"""Subcommand modules for valetpy.

Provides register_commands() which uses deferred imports to keep
``valetpy --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from valetpy.commands.drivers import drivers
    from valetpy.commands.paths import paths
    from valetpy.commands.serve import serve
    from valetpy.commands.which import which

    cli.add_command(serve)
    cli.add_command(which)
    cli.add_command(drivers)
    cli.add_command(paths)
