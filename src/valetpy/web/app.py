"""Starlette application that serves whatever the dispatcher decides.

Every method and path lands in one catch-all endpoint. The config store
is re-read on every request; the driver registry is built once, when the
app is created.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import quote

import structlog
from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import FileResponse, HTMLResponse, Response
from starlette.routing import Route

from valetpy.config.discovery import load_site_config
from valetpy.domain.types import DecisionKind, DispatchDecision
from valetpy.drivers.registry import DriverRegistry
from valetpy.errors import ConfigurationInvalidError, DriverFaultError, FrontControllerError
from valetpy.services.dispatch import RequestDispatcher
from valetpy.web.cgi import CgiRequest, run_front_controller
from valetpy.web.templates import (
    CONFIG_ERROR_TEMPLATE,
    ERROR_TEMPLATE,
    NOT_FOUND_TEMPLATE,
    build_template_environment,
)

if TYPE_CHECKING:
    from jinja2 import Environment

    from valetpy.config.settings import ValetSettings

HTTP_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
ORIGINAL_HOST_HEADER = "x-original-host"

log = structlog.get_logger(__name__)


def split_host_port(host_header: str, default_port: int) -> tuple[str, int]:
    """Split ``example.test:8080`` (or ``[::1]:8080``) into host and port."""
    if host_header.startswith("["):
        end = host_header.find("]") + 1
        host, rest = host_header[:end], host_header[end:]
        port = rest[1:] if rest.startswith(":") else ""
    else:
        host, _, port = host_header.partition(":")
    return host, int(port) if port.isdigit() else default_port


def raw_request_uri(request: Request) -> str:
    """Path and query exactly as the client sent them."""
    raw_path = request.scope.get("raw_path")
    path = raw_path.decode("latin-1").split("?", 1)[0] if raw_path else quote(request.url.path)
    query = request.url.query
    return f"{path}?{query}" if query else path


class ValetApp:
    """Request handler bound to settings, dispatcher, and templates."""

    def __init__(self, settings: ValetSettings, registry: DriverRegistry) -> None:
        self.settings = settings
        self.dispatcher = RequestDispatcher(registry)
        self.templates: Environment = build_template_environment(
            override_dir=settings.templates_dir
        )

    def _page(self, template: str, status_code: int, **context: object) -> HTMLResponse:
        html = self.templates.get_template(template).render(status=status_code, **context)
        return HTMLResponse(html, status_code=status_code)

    def not_found(self) -> HTMLResponse:
        return self._page(NOT_FOUND_TEMPLATE, 404)

    async def handle(self, request: Request) -> Response:
        host, port = split_host_port(request.headers.get("host", ""), self.settings.port)
        original_host = request.headers.get(ORIGINAL_HOST_HEADER)
        request_uri = raw_request_uri(request)

        with structlog.contextvars.bound_contextvars(host=original_host or host, uri=request_uri):
            try:
                response = await self._handle(request, host, port, original_host, request_uri)
            except ConfigurationInvalidError as exc:
                log.error("Configuration invalid", error=str(exc))
                response = self._page(
                    CONFIG_ERROR_TEMPLATE, 500, message=str(exc), path=exc.path
                )
            except DriverFaultError as exc:
                log.error(
                    "Driver fault", driver=exc.driver, stage=exc.stage, exc_info=exc.original
                )
                response = self._page(
                    ERROR_TEMPLATE,
                    500,
                    title="Internal Error",
                    message=f"The {exc.driver} driver failed while handling this request.",
                )
            except FrontControllerError as exc:
                log.error("Front controller failed", error=str(exc))
                response = self._page(ERROR_TEMPLATE, 502, title="Bad Gateway", message=str(exc))
            log.info("Handled request", method=request.method, status=response.status_code)
            return response

    def decide(
        self, host: str, request_uri: str, original_host: str | None
    ) -> DispatchDecision:
        """Load the config store and dispatch; blocking, so run off the event loop."""
        config = load_site_config(self.settings.resolved_config_path)
        return self.dispatcher.dispatch(host, request_uri, config, original_host=original_host)

    async def _handle(
        self,
        request: Request,
        host: str,
        port: int,
        original_host: str | None,
        request_uri: str,
    ) -> Response:
        decision = await run_in_threadpool(self.decide, host, request_uri, original_host)

        if decision.kind == DecisionKind.NOT_FOUND:
            log.debug("Not found", reason=decision.reason.value)
            return self.not_found()

        if decision.kind == DecisionKind.STATIC:
            return FileResponse(
                decision.file_path,
                media_type=decision.content_type,
                headers=decision.headers or None,
            )

        headers = dict(request.headers)
        if original_host:
            headers["host"] = original_host
        cgi_request = CgiRequest(
            method=request.method,
            request_uri=request_uri,
            query_string=request.url.query,
            host=original_host or host,
            port=port,
            headers=headers,
            body=await request.body(),
            remote_addr=request.client.host if request.client else "127.0.0.1",
            scheme=request.url.scheme,
        )
        result = await run_in_threadpool(
            run_front_controller,
            decision,
            cgi_request,
            php_cgi=self.settings.php_cgi,
            timeout=self.settings.cgi_timeout,
        )
        response = Response(content=result.body, status_code=result.status)
        for name, value in result.headers:
            if name.lower() == "content-length":
                continue
            response.headers.append(name, value)
        return response


def create_app(settings: ValetSettings, registry: DriverRegistry | None = None) -> Starlette:
    """Create the ASGI application.

    Discovers drivers from ``<home>/Extensions`` and installed entry points
    unless a prebuilt *registry* is supplied.
    """
    if registry is None:
        registry = DriverRegistry.discover(extensions_dir=settings.extensions_dir)
    handler = ValetApp(settings, registry)
    app = Starlette(
        routes=[Route("/{path:path}", handler.handle, methods=HTTP_METHODS)],
    )
    app.state.valet = handler
    return app
