"""Shared pytest fixtures and test helpers for valetpy tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from valetpy.config.models import SiteConfig
from valetpy.config.settings import ValetSettings
from valetpy.drivers.registry import DriverRegistry


@pytest.fixture(autouse=True)
def _clean_valet_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's own VALET_* variables out of every test."""
    for name in ("VALET_CONFIG", "VALET_HOME", "VALET_VERBOSE", "VALET_PORT", "VALET_PHP_CGI"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def sites_root(tmp_path: Path) -> Path:
    """Empty directory used as a configured root path."""
    root = tmp_path / "sites"
    root.mkdir()
    return root


@pytest.fixture
def valet_home(tmp_path: Path, sites_root: Path) -> Path:
    """Valet home with a config.json parking *sites_root* under ``.test``."""
    home = tmp_path / "home"
    home.mkdir()
    write_config(home, domain="test", paths=[str(sites_root)])
    return home


@pytest.fixture
def settings(valet_home: Path) -> ValetSettings:
    return ValetSettings(home=valet_home)


@pytest.fixture
def site_config(sites_root: Path) -> SiteConfig:
    return SiteConfig(domain="test", paths=[sites_root])


@pytest.fixture
def registry() -> DriverRegistry:
    """Built-in drivers only; no extensions, no installed plugins."""
    return DriverRegistry.discover(entry_points=False)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def write_config(home: Path, **data: Any) -> Path:
    """Write ``config.json`` into *home* and return its path."""
    path = home / "config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def make_site(root: Path, name: str, files: dict[str, str] | None = None) -> Path:
    """Create a site directory under *root* containing *files*."""
    site = root / name
    site.mkdir(parents=True, exist_ok=True)
    for relative, content in (files or {}).items():
        target = site / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return site
