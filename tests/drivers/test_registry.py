"""Tests for driver discovery, ordering, and assignment."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pluggy
import pytest

from tests.conftest import make_site
from valetpy.drivers.base import ValetDriver
from valetpy.drivers.builtins import BasicValetDriver, LaravelValetDriver
from valetpy.drivers.hookspecs import hookimpl
from valetpy.drivers.registry import (
    LOCAL_DRIVER_FILENAME,
    DriverRegistry,
    discover_entry_points,
    discover_extensions,
    load_driver_file,
)
from valetpy.errors import DriverFaultError

DRIVER_SOURCE = '''
from valetpy.drivers.base import ValetDriver


class {name}(ValetDriver):
    def serves(self, site_path, site_name, uri):
        return {serves}

    def is_static_file(self, site_path, site_name, uri):
        return None

    def front_controller_path(self, site_path, site_name, uri):
        return site_path / "{front}"
'''


def _driver_source(name: str, *, serves: str = "True", front: str = "index.php") -> str:
    return DRIVER_SOURCE.format(name=name, serves=serves, front=front)


class _NamedDriver(ValetDriver):
    def __init__(self, serves: bool = True) -> None:
        self._serves = serves

    def serves(self, site_path: Path, site_name: str, uri: str) -> bool:
        return self._serves

    def is_static_file(self, site_path: Path, site_name: str, uri: str) -> Path | None:
        return None

    def front_controller_path(self, site_path: Path, site_name: str, uri: str) -> Path | None:
        return None


class _ExplodingDriver(_NamedDriver):
    def serves(self, site_path: Path, site_name: str, uri: str) -> bool:
        raise RuntimeError("boom")


# ---------------------------------------------------------------------------
# Ordering and assignment
# ---------------------------------------------------------------------------


class TestDriverRegistry:
    def test_discover_orders_frameworks_before_fallback(self, registry: DriverRegistry) -> None:
        names = registry.list_driver_names()
        assert names[0] == "LaravelValetDriver"
        assert names[-1] == "BasicValetDriver"
        assert "WordPressValetDriver" in names

    def test_first_serving_driver_wins(self, sites_root: Path) -> None:
        site = make_site(sites_root, "any")
        first, second = _NamedDriver(), _NamedDriver()
        registry = DriverRegistry(builtins=[first, second], local_drivers=False)
        assert registry.assign(site, "any", "/") is first

    def test_skips_drivers_that_decline(self, sites_root: Path) -> None:
        site = make_site(sites_root, "any")
        declining, accepting = _NamedDriver(serves=False), _NamedDriver()
        registry = DriverRegistry(builtins=[declining], fallbacks=[accepting], local_drivers=False)
        assert registry.assign(site, "any", "/") is accepting

    def test_no_driver(self, sites_root: Path) -> None:
        site = make_site(sites_root, "any")
        registry = DriverRegistry(builtins=[_NamedDriver(serves=False)], local_drivers=False)
        assert registry.assign(site, "any", "/") is None

    def test_registered_driver_precedes_fallback(self, sites_root: Path, registry: DriverRegistry) -> None:
        site = make_site(sites_root, "plain", {"index.php": "<?php"})
        custom = _NamedDriver()
        registry.register(custom)
        assert registry.assign(site, "plain", "/") is custom

    def test_framework_driver_precedes_registered_driver(
        self, sites_root: Path, registry: DriverRegistry
    ) -> None:
        site = make_site(sites_root, "shop", {"artisan": "", "public/index.php": "<?php"})
        registry.register(_NamedDriver())
        assert isinstance(registry.assign(site, "shop", "/"), LaravelValetDriver)

    def test_plain_site_falls_back_to_basic(self, sites_root: Path, registry: DriverRegistry) -> None:
        site = make_site(sites_root, "plain", {"index.html": ""})
        assert isinstance(registry.assign(site, "plain", "/"), BasicValetDriver)

    def test_raising_serves_is_wrapped(self, sites_root: Path) -> None:
        site = make_site(sites_root, "any")
        registry = DriverRegistry(builtins=[_ExplodingDriver()], local_drivers=False)
        with pytest.raises(DriverFaultError) as exc_info:
            registry.assign(site, "any", "/")
        assert exc_info.value.driver == "_ExplodingDriver"
        assert exc_info.value.stage == "serves"
        assert isinstance(exc_info.value.original, RuntimeError)


# ---------------------------------------------------------------------------
# Project-local driver
# ---------------------------------------------------------------------------


class TestLocalDriver:
    def test_local_driver_precedes_fallback(self, sites_root: Path, registry: DriverRegistry) -> None:
        site = make_site(
            sites_root,
            "custom",
            {"index.php": "<?php", LOCAL_DRIVER_FILENAME: _driver_source("CustomValetDriver")},
        )
        driver = registry.assign(site, "custom", "/")
        assert driver is not None
        assert driver.name == "CustomValetDriver"

    def test_local_driver_only_applies_to_its_site(
        self, sites_root: Path, registry: DriverRegistry
    ) -> None:
        make_site(sites_root, "custom", {LOCAL_DRIVER_FILENAME: _driver_source("CustomValetDriver")})
        other = make_site(sites_root, "other", {"index.php": "<?php"})
        assert isinstance(registry.assign(other, "other", "/"), BasicValetDriver)

    def test_local_driver_is_cached(self, sites_root: Path, registry: DriverRegistry) -> None:
        site = make_site(sites_root, "custom", {LOCAL_DRIVER_FILENAME: _driver_source("CustomValetDriver")})
        first = registry.local_drivers(site)
        assert registry.local_drivers(site) is first

    def test_local_driver_reloads_on_change(self, sites_root: Path, registry: DriverRegistry) -> None:
        site = make_site(sites_root, "custom", {LOCAL_DRIVER_FILENAME: _driver_source("FirstDriver")})
        assert [d.name for d in registry.local_drivers(site)] == ["FirstDriver"]

        py_file = site / LOCAL_DRIVER_FILENAME
        py_file.write_text(_driver_source("SecondDriver"), encoding="utf-8")
        stat = py_file.stat()
        os.utime(py_file, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))

        assert [d.name for d in registry.local_drivers(site)] == ["SecondDriver"]

    def test_broken_local_driver_is_a_warning(
        self, sites_root: Path, registry: DriverRegistry, caplog: pytest.LogCaptureFixture
    ) -> None:
        site = make_site(
            sites_root,
            "broken",
            {"index.php": "<?php", LOCAL_DRIVER_FILENAME: "this is not python("},
        )
        with caplog.at_level(logging.WARNING, logger="valetpy.drivers.registry"):
            driver = registry.assign(site, "broken", "/")
        assert isinstance(driver, BasicValetDriver)
        assert "Failed to load driver file" in caplog.text

    def test_local_drivers_can_be_disabled(self, sites_root: Path) -> None:
        site = make_site(sites_root, "custom", {LOCAL_DRIVER_FILENAME: _driver_source("CustomValetDriver")})
        registry = DriverRegistry(local_drivers=False)
        assert registry.local_drivers(site) == []

    def test_unstattable_site_has_no_local_driver(
        self, tmp_path: Path, registry: DriverRegistry
    ) -> None:
        assert registry.local_drivers(tmp_path / ("x" * 300)) == []


# ---------------------------------------------------------------------------
# Extension directory
# ---------------------------------------------------------------------------


class TestDiscoverExtensions:
    def test_missing_directory(self, tmp_path: Path) -> None:
        assert discover_extensions(tmp_path / "Extensions") == []

    def test_loads_in_sorted_order(self, tmp_path: Path) -> None:
        ext = tmp_path / "Extensions"
        ext.mkdir()
        (ext / "b_driver.py").write_text(_driver_source("BDriver"), encoding="utf-8")
        (ext / "a_driver.py").write_text(_driver_source("ADriver"), encoding="utf-8")
        assert [d.name for d in discover_extensions(ext)] == ["ADriver", "BDriver"]

    def test_skips_private_files(self, tmp_path: Path) -> None:
        ext = tmp_path / "Extensions"
        ext.mkdir()
        (ext / "_helpers.py").write_text(_driver_source("HelperDriver"), encoding="utf-8")
        assert discover_extensions(ext) == []

    def test_broken_extension_does_not_block_others(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        ext = tmp_path / "Extensions"
        ext.mkdir()
        (ext / "a_broken.py").write_text("raise ImportError('nope')", encoding="utf-8")
        (ext / "b_good.py").write_text(_driver_source("GoodDriver"), encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="valetpy.drivers.registry"):
            drivers = discover_extensions(ext)
        assert [d.name for d in drivers] == ["GoodDriver"]
        assert "a_broken.py" in caplog.text

    def test_extensions_precede_fallback(self, tmp_path: Path, sites_root: Path) -> None:
        ext = tmp_path / "Extensions"
        ext.mkdir()
        (ext / "custom.py").write_text(_driver_source("ExtDriver"), encoding="utf-8")
        registry = DriverRegistry.discover(extensions_dir=ext, entry_points=False)
        site = make_site(sites_root, "plain", {"index.php": "<?php"})
        driver = registry.assign(site, "plain", "/")
        assert driver is not None
        assert driver.name == "ExtDriver"
        assert registry.list_driver_names()[-2:] == ["ExtDriver", "BasicValetDriver"]


class TestLoadDriverFile:
    def test_imported_drivers_are_not_instantiated(self, tmp_path: Path) -> None:
        py_file = tmp_path / "subclass.py"
        py_file.write_text(
            "from valetpy.drivers.builtins import BasicValetDriver\n\n\n"
            "class StaticSiteDriver(BasicValetDriver):\n"
            "    pass\n",
            encoding="utf-8",
        )
        drivers = load_driver_file(py_file, "valetpy_test_subclass")
        assert [d.name for d in drivers] == ["StaticSiteDriver"]

    def test_abstract_classes_are_skipped(self, tmp_path: Path) -> None:
        py_file = tmp_path / "abstract.py"
        py_file.write_text(
            "from valetpy.drivers.base import ValetDriver\n\n\n"
            "class Incomplete(ValetDriver):\n"
            "    pass\n",
            encoding="utf-8",
        )
        assert load_driver_file(py_file, "valetpy_test_abstract") == []


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


class _PackagedDrivers:
    @hookimpl
    def register_drivers(self) -> list[ValetDriver]:
        return [_NamedDriver()]


class _NotADriverPlugin:
    @hookimpl
    def register_drivers(self) -> list[object]:
        return [object()]


def _fake_entrypoints(*plugins: object):
    def load(self: pluggy.PluginManager, group: str, name: str | None = None) -> int:
        for plugin in plugins:
            self.register(plugin)
        return len(plugins)

    return load


class TestDiscoverEntryPoints:
    def test_collects_registered_drivers(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            pluggy.PluginManager, "load_setuptools_entrypoints", _fake_entrypoints(_PackagedDrivers())
        )
        assert [d.name for d in discover_entry_points()] == ["_NamedDriver"]

    def test_non_drivers_are_skipped(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        monkeypatch.setattr(
            pluggy.PluginManager,
            "load_setuptools_entrypoints",
            _fake_entrypoints(_NotADriverPlugin(), _PackagedDrivers()),
        )
        with caplog.at_level(logging.WARNING, logger="valetpy.drivers.registry"):
            drivers = discover_entry_points()
        assert [d.name for d in drivers] == ["_NamedDriver"]
        assert "non-driver" in caplog.text

    def test_entry_point_drivers_join_registry(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            pluggy.PluginManager, "load_setuptools_entrypoints", _fake_entrypoints(_PackagedDrivers())
        )
        registry = DriverRegistry.discover()
        assert registry.list_driver_names()[-2:] == ["_NamedDriver", "BasicValetDriver"]
