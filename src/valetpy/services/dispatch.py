"""RequestDispatcher — host + URI -> DispatchDecision.

Linear state machine, no backtracking::

    ParseHost -> ResolveSitePath -> AssignDriver -> NormalizeUri
              -> ClassifyRequest -> Static | Dynamic | NotFound

NotFound is a returned value, never an exception. Exceptions raised by
driver code are wrapped in DriverFaultError; nothing else escapes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import PurePosixPath
from typing import TypeVar

from valetpy.config.models import SiteConfig
from valetpy.domain.hostname import resolve_site_identity
from valetpy.domain.sites import resolve_site_path
from valetpy.domain.types import (
    DispatchDecision,
    DynamicDecision,
    NotFoundDecision,
    NotFoundReason,
    RequestContext,
    StaticDecision,
)
from valetpy.drivers.base import ValetDriver
from valetpy.drivers.registry import DriverRegistry
from valetpy.errors import DriverFaultError

DYNAMIC_EXTENSION = ".php"

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _call_driver(driver: ValetDriver, stage: str, fn: Callable[[], T]) -> T:
    try:
        return fn()
    except DriverFaultError:
        raise
    except Exception as exc:
        raise DriverFaultError(driver.name, stage, exc) from exc


class RequestDispatcher:
    """Runs the dispatch pipeline against a driver registry."""

    def __init__(self, registry: DriverRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> DriverRegistry:
        return self._registry

    def dispatch(
        self,
        raw_host: str,
        raw_uri: str,
        config: SiteConfig,
        *,
        original_host: str | None = None,
    ) -> DispatchDecision:
        """Decide how to answer one request.

        *raw_uri* may still carry its query string and percent-encoding.
        *original_host*, from a tunnelling proxy's ``X-Original-Host``
        header, replaces *raw_host* before any parsing.
        """
        request = RequestContext.from_raw(raw_host, raw_uri, original_host=original_host)
        return self.dispatch_request(request, config)

    def dispatch_request(self, request: RequestContext, config: SiteConfig) -> DispatchDecision:
        """Same as :meth:`dispatch` for an already-parsed request."""
        identity = resolve_site_identity(request.host, config)

        site = resolve_site_path(identity, config.paths)
        if site is None:
            logger.debug("No site directory for %s", request.host)
            return NotFoundDecision(reason=NotFoundReason.SITE)

        driver = self._registry.assign(site.path, site.site_name, request.uri)
        if driver is None:
            logger.debug("No driver serves %s", site.path)
            return NotFoundDecision(reason=NotFoundReason.DRIVER)

        uri = _call_driver(driver, "mutate_uri", lambda: driver.mutate_uri(request.uri))

        is_dynamic_script = PurePosixPath(uri).suffix == DYNAMIC_EXTENSION
        if uri != "/" and not is_dynamic_script:
            static_path = _call_driver(
                driver,
                "is_static_file",
                lambda: driver.is_static_file(site.path, site.site_name, uri),
            )
            if static_path:
                static = _call_driver(
                    driver,
                    "serve_static_file",
                    lambda: driver.serve_static_file(static_path, site.path, site.site_name, uri),
                )
                return StaticDecision(
                    file_path=static.path,
                    content_type=static.content_type,
                    headers=static.headers,
                    driver=driver.name,
                    site=site,
                )

        front_controller = _call_driver(
            driver,
            "front_controller_path",
            lambda: driver.front_controller_path(site.path, site.site_name, uri),
        )
        if not front_controller:
            logger.debug("%s has no front controller for %s", driver.name, uri)
            return NotFoundDecision(reason=NotFoundReason.FRONT_CONTROLLER)

        document_root = _call_driver(
            driver,
            "document_root",
            lambda: driver.document_root(site.path, front_controller),
        )
        return DynamicDecision(
            front_controller_path=front_controller,
            working_dir=front_controller.parent,
            document_root=document_root,
            driver=driver.name,
            site=site,
            uri=uri,
        )
