"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy driver discovery and centralized
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from valetpy.output.formatters import format_result

if TYPE_CHECKING:
    from valetpy.config.settings import ValetSettings
    from valetpy.drivers.registry import DriverRegistry
    from valetpy.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The driver registry is built on first use so ``--help`` and
    ``--version`` never import extension files.
    """

    def __init__(self, settings: ValetSettings) -> None:
        self.settings = settings
        self._registry: DriverRegistry | None = None

        from valetpy.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def registry(self) -> DriverRegistry:
        """The driver registry (discovered lazily on first access)."""
        if self._registry is None:
            from valetpy.drivers.registry import DriverRegistry

            self._registry = DriverRegistry.discover(extensions_dir=self.settings.extensions_dir)
        return self._registry

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        output = format_result(
            result,
            json_output=self.settings.json_output,
            verbose=self.settings.verbose,
        )
        if result.ok:
            click.echo(output)
            if not self.settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
