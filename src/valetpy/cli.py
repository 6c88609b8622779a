"""Root CLI group for valetpy with global flags and command registration."""

from __future__ import annotations

import click

from valetpy import __version__
from valetpy.commands import register_commands
from valetpy.commands._context import AppContext
from valetpy.config.settings import ValetSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="valetpy")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logging.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config.json path.")
@click.option("--home", default=None, help="Valet home directory (default: ~/.valet).")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    home: str | None,
) -> None:
    """valetpy: route *.test hosts to local project directories."""
    ctx.ensure_object(dict)
    # Unset flags stay None so VALET_* env vars can still apply.
    settings = ValetSettings.from_cli(
        config_path=config_path,
        home=home,
        json_output=json_output or None,
        verbose=verbose or None,
        log_json=log_json or None,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
