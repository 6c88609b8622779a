"""Tests for SiteService: which, paths, drivers."""

from __future__ import annotations

from pathlib import Path

from tests.conftest import make_site, write_config
from valetpy.config.settings import ValetSettings
from valetpy.drivers.registry import DriverRegistry
from valetpy.services.sites import SiteService


class TestWhich:
    def test_static(self, settings: ValetSettings, registry: DriverRegistry, sites_root: Path) -> None:
        site = make_site(sites_root, "blog", {"style.css": ""})
        result = SiteService(settings, registry).which("blog.test", "/style.css")
        assert result.ok
        assert result.data["decision"] == "static"
        assert result.data["driver"] == "BasicValetDriver"
        assert result.data["file"] == str(site.resolve() / "style.css")
        assert result.data["content_type"] == "text/css"

    def test_dynamic(self, settings: ValetSettings, registry: DriverRegistry, sites_root: Path) -> None:
        site = make_site(sites_root, "shop", {"artisan": "", "public/index.php": "<?php"})
        result = SiteService(settings, registry).which("shop.test", "/cart")
        assert result.ok
        assert result.data["decision"] == "dynamic"
        assert result.data["driver"] == "LaravelValetDriver"
        assert result.data["front_controller"] == str(site.resolve() / "public" / "index.php")
        assert result.data["working_dir"] == str(site.resolve() / "public")

    def test_not_found_reports_reason(self, settings: ValetSettings, registry: DriverRegistry) -> None:
        result = SiteService(settings, registry).which("missing.test")
        assert result.ok
        assert result.data["decision"] == "not_found"
        assert result.data["reason"] == "site"
        assert result.data["site_name"] == "missing"

    def test_reports_identity(self, settings: ValetSettings, registry: DriverRegistry) -> None:
        result = SiteService(settings, registry).which("www.api.blog.test.nip.io")
        assert result.data["site_name"] == "api.blog"
        assert result.data["domain_fallback"] == "blog"

    def test_invalid_config(self, settings: ValetSettings, registry: DriverRegistry, valet_home: Path) -> None:
        write_config(valet_home, paths=[])
        result = SiteService(settings, registry).which("blog.test")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "CONFIGURATION_INVALID"


class TestPaths:
    def test_lists_sites_per_root(
        self, settings: ValetSettings, registry: DriverRegistry, sites_root: Path
    ) -> None:
        make_site(sites_root, "blog")
        make_site(sites_root, "api")
        make_site(sites_root, ".hidden")
        (sites_root / "notes.txt").write_text("", encoding="utf-8")
        result = SiteService(settings, registry).paths()
        assert result.ok
        assert result.data["domain"] == "test"
        assert result.data["roots"] == [{"path": str(sites_root), "sites": ["api.test", "blog.test"]}]

    def test_missing_root_is_a_warning(
        self, settings: ValetSettings, registry: DriverRegistry, valet_home: Path, tmp_path: Path
    ) -> None:
        gone = tmp_path / "gone"
        write_config(valet_home, domain="test", paths=[str(gone)])
        result = SiteService(settings, registry).paths()
        assert result.ok
        assert result.data["roots"] == [{"path": str(gone), "sites": []}]
        assert any(str(gone) in w for w in result.warnings)

    def test_missing_config(self, tmp_path: Path, registry: DriverRegistry) -> None:
        settings = ValetSettings(home=tmp_path / "nowhere")
        result = SiteService(settings, registry).paths()
        assert not result.ok
        assert result.error is not None
        assert "not found" in result.error.message


class TestDrivers:
    def test_lists_in_check_order(self, settings: ValetSettings, registry: DriverRegistry) -> None:
        result = SiteService(settings, registry).drivers()
        assert result.ok
        assert result.data["drivers"] == [
            "LaravelValetDriver",
            "WordPressValetDriver",
            "SymfonyValetDriver",
            "JigsawValetDriver",
            "BasicValetDriver",
        ]
