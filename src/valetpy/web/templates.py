"""Jinja2 loading for the harness's error pages, with home-directory overrides."""

from __future__ import annotations

from pathlib import Path

from jinja2 import BaseLoader, ChoiceLoader, Environment, FileSystemLoader, PackageLoader, select_autoescape

NOT_FOUND_TEMPLATE = "404.html"
CONFIG_ERROR_TEMPLATE = "config-error.html"
ERROR_TEMPLATE = "error.html"


def build_template_environment(*, override_dir: Path | None = None) -> Environment:
    """Build a Jinja2 environment with user overrides before packaged defaults.

    Overrides are read from *override_dir* (``<home>/templates``) so the 404
    page can be customised without touching the package.
    """
    loaders: list[BaseLoader] = []
    if override_dir is not None:
        loaders.append(FileSystemLoader(str(override_dir)))

    loaders.append(PackageLoader("valetpy", "templates"))
    return Environment(loader=ChoiceLoader(loaders), autoescape=select_autoescape(["html"]))
