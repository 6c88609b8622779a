"""Built-in drivers.

Framework drivers are checked in the order of FRAMEWORK_DRIVERS, ahead of
any project-local or extension driver. BasicValetDriver claims every
site and is always checked last.
"""

from __future__ import annotations

from pathlib import Path

from valetpy.drivers.base import ValetDriver, is_within, site_file


def _actual_file(site_path: Path, candidate: Path) -> Path | None:
    try:
        found = candidate.is_file()
    except OSError:
        # A path segment longer than NAME_MAX is a route, not a file.
        return None
    if found and is_within(site_path, candidate):
        return candidate
    return None


class BasicValetDriver(ValetDriver):
    """Plain PHP or HTML project: serve files as they lie on disk."""

    def serves(self, site_path: Path, site_name: str, uri: str) -> bool:
        return True

    def is_static_file(self, site_path: Path, site_name: str, uri: str) -> Path | None:
        return _actual_file(site_path, site_file(site_path, "public", uri)) or _actual_file(
            site_path, site_file(site_path, uri)
        )

    def front_controller_path(self, site_path: Path, site_name: str, uri: str) -> Path | None:
        directory = uri.rstrip("/")
        candidates = [
            site_file(site_path, uri),
            site_file(site_path, directory, "index.php"),
            site_file(site_path, directory, "index.html"),
            site_path / "index.php",
            site_path / "public" / "index.php",
            site_path / "public" / "index.html",
        ]
        for candidate in candidates:
            if found := _actual_file(site_path, candidate):
                return found
        return None

    def document_root(self, site_path: Path, front_controller: Path) -> Path:
        if front_controller.parent == site_path / "public":
            return site_path / "public"
        return site_path


class LaravelValetDriver(ValetDriver):
    """Laravel: ``public/index.php`` plus ``artisan``; storage symlink support."""

    def serves(self, site_path: Path, site_name: str, uri: str) -> bool:
        return (site_path / "public" / "index.php").is_file() and (site_path / "artisan").is_file()

    def is_static_file(self, site_path: Path, site_name: str, uri: str) -> Path | None:
        if found := _actual_file(site_path, site_file(site_path, "public", uri)):
            return found
        storage_uri = uri[len("/storage") :] if uri.startswith("/storage/") else uri
        return _actual_file(site_path, site_file(site_path, "storage", "app", "public", storage_uri))

    def front_controller_path(self, site_path: Path, site_name: str, uri: str) -> Path | None:
        return site_path / "public" / "index.php"

    def document_root(self, site_path: Path, front_controller: Path) -> Path:
        return site_path / "public"


class SymfonyValetDriver(ValetDriver):
    """Symfony: ``web/app(_dev).php`` with AppKernel, or ``public/index.php`` with Kernel."""

    def serves(self, site_path: Path, site_name: str, uri: str) -> bool:
        legacy = (
            (site_path / "web" / "app_dev.php").is_file() or (site_path / "web" / "app.php").is_file()
        ) and (site_path / "app" / "AppKernel.php").is_file()
        flex = (site_path / "public" / "index.php").is_file() and (
            site_path / "src" / "Kernel.php"
        ).is_file()
        return legacy or flex

    def is_static_file(self, site_path: Path, site_name: str, uri: str) -> Path | None:
        return _actual_file(site_path, site_file(site_path, "web", uri)) or _actual_file(
            site_path, site_file(site_path, "public", uri)
        )

    def front_controller_path(self, site_path: Path, site_name: str, uri: str) -> Path | None:
        for candidate in (
            site_path / "web" / "app_dev.php",
            site_path / "web" / "app.php",
            site_path / "public" / "index.php",
        ):
            if candidate.is_file():
                return candidate
        return None

    def document_root(self, site_path: Path, front_controller: Path) -> Path:
        return front_controller.parent


class WordPressValetDriver(BasicValetDriver):
    """WordPress: any directory with ``wp-config.php`` (or the sample)."""

    def serves(self, site_path: Path, site_name: str, uri: str) -> bool:
        return (site_path / "wp-config.php").is_file() or (
            site_path / "wp-config-sample.php"
        ).is_file()

    def front_controller_path(self, site_path: Path, site_name: str, uri: str) -> Path | None:
        if uri.endswith("/wp-admin"):
            uri = f"{uri}/"
        return super().front_controller_path(site_path, site_name, uri)


class JigsawValetDriver(BasicValetDriver):
    """Jigsaw static sites: everything lives under ``build_local/``."""

    def serves(self, site_path: Path, site_name: str, uri: str) -> bool:
        return (site_path / "build_local").is_dir()

    def mutate_uri(self, uri: str) -> str:
        return f"/build_local{uri}".rstrip("/")


FRAMEWORK_DRIVERS: tuple[type[ValetDriver], ...] = (
    LaravelValetDriver,
    WordPressValetDriver,
    SymfonyValetDriver,
    JigsawValetDriver,
)

FALLBACK_DRIVERS: tuple[type[ValetDriver], ...] = (BasicValetDriver,)
