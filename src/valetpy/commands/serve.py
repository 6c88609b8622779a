"""serve — run the ASGI harness under hypercorn."""

from __future__ import annotations

import asyncio

import click

from valetpy.commands._base import ValetCommand
from valetpy.commands._context import AppContext


@click.command(
    cls=ValetCommand,
    examples="""\
  # Serve on the default address (127.0.0.1:8080)
  valetpy serve

  # Bind port 80 on all interfaces (behind sudo or a capability)
  valetpy serve --host 0.0.0.0 --port 80

  # Use a specific php-cgi binary
  VALET_PHP_CGI=/opt/homebrew/bin/php-cgi valetpy serve""",
)
@click.option("--host", default=None, help="Bind address (default: settings.host).")
@click.option("--port", default=None, type=int, help="Listen port (default: settings.port).")
@click.pass_obj
def serve(app: AppContext, host: str | None, port: int | None) -> None:
    """Serve every configured site through the dispatcher."""
    from hypercorn.asyncio import serve as hyper_serve
    from hypercorn.config import Config as HyperConfig

    from valetpy.web.app import create_app

    settings = app.settings
    if host is not None or port is not None:
        settings = settings.model_copy(
            update={
                "host": host if host is not None else settings.host,
                "port": port if port is not None else settings.port,
            }
        )

    asgi_app = create_app(settings, app.registry)
    config = HyperConfig()
    config.bind = [f"{settings.host}:{settings.port}"]
    config.accesslog = "-" if settings.verbose else None
    click.echo(f"Serving on http://{settings.host}:{settings.port}", err=True)
    asyncio.run(hyper_serve(asgi_app, config))
