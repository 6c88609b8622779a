"""SiteService — dispatch inspection for the CLI.

Wraps the dispatcher and config store in ServiceResult so ``valetpy which``,
``valetpy paths`` and ``valetpy drivers`` share one output path.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from valetpy.config.discovery import load_site_config
from valetpy.domain.hostname import resolve_site_identity
from valetpy.domain.types import DecisionKind
from valetpy.errors import ValetError
from valetpy.services.dispatch import RequestDispatcher
from valetpy.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from valetpy.config.settings import ValetSettings
    from valetpy.drivers.registry import DriverRegistry

logger = logging.getLogger(__name__)


class SiteService:
    """Read-only operations over the config store and driver registry."""

    def __init__(self, settings: ValetSettings, registry: DriverRegistry) -> None:
        self._settings = settings
        self._registry = registry

    def which(self, host: str, uri: str = "/") -> ServiceResult:
        """Dry-run the dispatch pipeline for *host* and *uri*."""
        op = "which"
        try:
            config = load_site_config(self._settings.resolved_config_path)
            identity = resolve_site_identity(host, config)
            decision = RequestDispatcher(self._registry).dispatch(host, uri, config)
        except ValetError as exc:
            return ServiceResult(ok=False, op=op, error=ServiceError.from_exception(exc))

        data: dict[str, Any] = {
            "host": host,
            "uri": uri,
            "site_name": identity.site_name,
            "domain_fallback": identity.domain_fallback,
            "decision": str(decision.kind),
        }
        if decision.kind == DecisionKind.NOT_FOUND:
            data["reason"] = decision.reason.value
        elif decision.kind == DecisionKind.STATIC:
            data["site_path"] = str(decision.site.path)
            data["driver"] = decision.driver
            data["file"] = str(decision.file_path)
            data["content_type"] = decision.content_type
        else:
            data["site_path"] = str(decision.site.path)
            data["driver"] = decision.driver
            data["front_controller"] = str(decision.front_controller_path)
            data["working_dir"] = str(decision.working_dir)
        return ServiceResult(ok=True, op=op, data=data)

    def paths(self) -> ServiceResult:
        """List configured roots and the site directories each contains."""
        op = "paths"
        try:
            config = load_site_config(self._settings.resolved_config_path)
        except ValetError as exc:
            return ServiceResult(ok=False, op=op, error=ServiceError.from_exception(exc))

        warnings: list[str] = []
        roots: list[dict[str, Any]] = []
        for root in config.paths:
            if not root.is_dir():
                warnings.append(f"Configured path does not exist: {root}")
                roots.append({"path": str(root), "sites": []})
                continue
            sites = sorted(p.name for p in root.iterdir() if p.is_dir() and not p.name.startswith("."))
            roots.append(
                {
                    "path": str(root),
                    "sites": [f"{name}.{config.domain}" for name in sites],
                }
            )
        return ServiceResult(
            ok=True,
            op=op,
            data={"domain": config.domain, "roots": roots},
            warnings=warnings,
        )

    def drivers(self) -> ServiceResult:
        """List process-wide drivers in check order."""
        return ServiceResult(
            ok=True,
            op="drivers",
            data={"drivers": self._registry.list_driver_names()},
        )
