"""The driver interface.

A driver encapsulates how one kind of project is served: whether it
claims a site, how it rewrites URIs, which requests are static assets,
and which script is the front controller for everything else.

Drivers are plain objects. Subclass :class:`ValetDriver` and implement
the three abstract methods; the rest have sensible defaults::

    class HugoValetDriver(ValetDriver):
        def serves(self, site_path, site_name, uri):
            return (site_path / "config.toml").is_file()

        def is_static_file(self, site_path, site_name, uri):
            candidate = site_path / "public" / uri.lstrip("/")
            return candidate if candidate.is_file() else None

        def front_controller_path(self, site_path, site_name, uri):
            return None
"""

from __future__ import annotations

import mimetypes
from abc import ABC, abstractmethod
from pathlib import Path

from valetpy.domain.types import StaticFile

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class ValetDriver(ABC):
    """Abstract base for every driver."""

    @property
    def name(self) -> str:
        """Display name, used in logs and dispatch decisions."""
        return type(self).__name__

    @abstractmethod
    def serves(self, site_path: Path, site_name: str, uri: str) -> bool:
        """Whether this driver handles the project at *site_path*.

        Called for every registered driver on every request; keep it to a
        few stat calls.
        """

    def mutate_uri(self, uri: str) -> str:
        """Rewrite the incoming URI before classification. Identity by default."""
        return uri

    @abstractmethod
    def is_static_file(self, site_path: Path, site_name: str, uri: str) -> Path | None:
        """Return the absolute path of the static asset *uri* names, if any."""

    def serve_static_file(
        self, path: Path, site_path: Path, site_name: str, uri: str
    ) -> StaticFile:
        """Describe how to write *path* back to the client."""
        content_type, _ = mimetypes.guess_type(path.name)
        return StaticFile(path=path, content_type=content_type or DEFAULT_CONTENT_TYPE)

    @abstractmethod
    def front_controller_path(self, site_path: Path, site_name: str, uri: str) -> Path | None:
        """Return the script that handles dynamic requests, or None."""

    def document_root(self, site_path: Path, front_controller: Path) -> Path:
        """Directory exposed to the front controller as ``DOCUMENT_ROOT``."""
        return site_path

    def __repr__(self) -> str:
        return f"<{self.name}>"


def site_file(site_path: Path, *parts: str) -> Path:
    """Join URI-ish *parts* under *site_path*, ignoring leading slashes."""
    return site_path.joinpath(*(p.lstrip("/") for p in parts if p.strip("/")))


def is_within(root: Path, target: Path) -> bool:
    """Whether *target* resolves to somewhere inside *root*."""
    try:
        target.resolve().relative_to(root.resolve())
    except (ValueError, OSError):
        return False
    return True
