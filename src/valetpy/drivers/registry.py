"""Driver discovery, ordering, and assignment.

Check order for a site:
  1. built-in framework drivers (``FRAMEWORK_DRIVERS``)
  2. the project-local driver, ``valet_driver.py`` in the site directory
  3. extension drivers from ``<home>/Extensions/*.py``, sorted by filename
  4. drivers from installed packages (``valetpy.drivers`` entry points)
  5. fallback drivers (``FALLBACK_DRIVERS``)

Everything except (2) is discovered once, at process start. Local driver
modules are loaded on demand and cached by path and modification time.

INVARIANT: A broken driver file is a warning, never an error.
"""

from __future__ import annotations

import hashlib
import importlib.util
import inspect
import logging
import sys
import threading
from collections.abc import Iterable
from pathlib import Path
from types import ModuleType

import pluggy

from valetpy.drivers.base import ValetDriver
from valetpy.drivers.builtins import FALLBACK_DRIVERS, FRAMEWORK_DRIVERS
from valetpy.drivers.hookspecs import ENTRY_POINT_GROUP, PROJECT_NAME, ValetHookSpec
from valetpy.errors import DriverFaultError

LOCAL_DRIVER_FILENAME = "valet_driver.py"

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# File-based driver loading
# ---------------------------------------------------------------------------


def _load_module(py_file: Path, module_name: str) -> ModuleType | None:
    try:
        spec = importlib.util.spec_from_file_location(module_name, py_file)
        if spec is None or spec.loader is None:
            logger.warning("Could not create module spec for %s", py_file)
            return None
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)
    except Exception:
        logger.warning("Failed to load driver file %s", py_file, exc_info=True)
        sys.modules.pop(module_name, None)
        return None
    return module


def load_driver_file(py_file: Path, module_name: str) -> list[ValetDriver]:
    """Import *py_file* and instantiate every concrete ValetDriver it defines.

    Classes are instantiated in definition order. Imported driver classes
    (for example a base class pulled in from ``valetpy.drivers.builtins``)
    are skipped.
    """
    module = _load_module(py_file, module_name)
    if module is None:
        return []

    classes = [
        obj
        for _name, obj in vars(module).items()
        if inspect.isclass(obj)
        and obj.__module__ == module_name
        and issubclass(obj, ValetDriver)
        and not inspect.isabstract(obj)
    ]

    drivers: list[ValetDriver] = []
    for cls in classes:
        try:
            drivers.append(cls())
        except Exception:
            logger.warning(
                "Failed to instantiate driver class %s from %s",
                cls.__name__,
                py_file,
                exc_info=True,
            )
            continue
        logger.debug("Loaded driver %s from %s", cls.__name__, py_file)
    return drivers


def discover_extensions(extensions_dir: Path) -> list[ValetDriver]:
    """Load drivers from every ``*.py`` file in *extensions_dir*.

    Files are read in sorted order; ``_``-prefixed files are skipped so
    extensions can share helper modules.
    """
    if not extensions_dir.is_dir():
        return []

    drivers: list[ValetDriver] = []
    for py_file in sorted(extensions_dir.glob("*.py")):
        if py_file.name.startswith("_"):
            continue
        drivers.extend(load_driver_file(py_file, f"valetpy_extension_{py_file.stem}"))
    return drivers


def discover_entry_points() -> list[ValetDriver]:
    """Collect drivers from plugins registered under the ``valetpy.drivers`` group."""
    pm = pluggy.PluginManager(PROJECT_NAME)
    pm.add_hookspecs(ValetHookSpec)
    pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)

    drivers: list[ValetDriver] = []
    for plugin_name, plugin in pm.list_name_plugin():
        if inspect.isclass(plugin):
            try:
                plugin = plugin()
            except Exception:
                logger.warning("Failed to instantiate entry-point plugin %s", plugin_name, exc_info=True)
                continue
        hook = getattr(plugin, "register_drivers", None)
        if hook is None:
            continue
        try:
            provided = hook() or []
        except Exception:
            logger.warning("Failed to collect drivers from plugin %s", plugin_name, exc_info=True)
            continue
        for driver in provided:
            if not isinstance(driver, ValetDriver):
                logger.warning("Plugin %s returned a non-driver %r; skipping", plugin_name, driver)
                continue
            drivers.append(driver)
    return drivers


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class DriverRegistry:
    """Ordered collection of drivers with first-match assignment."""

    def __init__(
        self,
        builtins: Iterable[ValetDriver] = (),
        extensions: Iterable[ValetDriver] = (),
        fallbacks: Iterable[ValetDriver] = (),
        *,
        local_drivers: bool = True,
    ) -> None:
        self._builtins = list(builtins)
        self._extensions = list(extensions)
        self._fallbacks = list(fallbacks)
        self._local_drivers = local_drivers
        self._local_cache: dict[Path, tuple[int, list[ValetDriver]]] = {}
        self._lock = threading.Lock()

    @classmethod
    def discover(
        cls,
        *,
        extensions_dir: Path | None = None,
        entry_points: bool = True,
    ) -> DriverRegistry:
        """Build the process-wide registry from every discovery source."""
        extensions: list[ValetDriver] = []
        if extensions_dir is not None:
            extensions.extend(discover_extensions(extensions_dir))
        if entry_points:
            extensions.extend(discover_entry_points())
        registry = cls(
            builtins=[driver_cls() for driver_cls in FRAMEWORK_DRIVERS],
            extensions=extensions,
            fallbacks=[driver_cls() for driver_cls in FALLBACK_DRIVERS],
        )
        logger.debug("Driver registry: %s", registry.list_driver_names())
        return registry

    def register(self, driver: ValetDriver) -> None:
        """Append *driver* after existing extensions, ahead of the fallbacks."""
        self._extensions.append(driver)

    @property
    def drivers(self) -> list[ValetDriver]:
        """Process-wide drivers in check order (no project-local driver)."""
        return [*self._builtins, *self._extensions, *self._fallbacks]

    def list_driver_names(self) -> list[str]:
        return [driver.name for driver in self.drivers]

    def local_drivers(self, site_path: Path) -> list[ValetDriver]:
        """Drivers defined by ``valet_driver.py`` inside *site_path*, if any."""
        if not self._local_drivers:
            return []
        py_file = site_path / LOCAL_DRIVER_FILENAME
        try:
            mtime = py_file.stat().st_mtime_ns
        except OSError:
            return []

        with self._lock:
            cached = self._local_cache.get(py_file)
            if cached is not None and cached[0] == mtime:
                return cached[1]
            digest = hashlib.sha1(str(py_file).encode("utf-8")).hexdigest()[:12]
            drivers = load_driver_file(py_file, f"valetpy_local_driver_{digest}")
            self._local_cache[py_file] = (mtime, drivers)
            return drivers

    def chain_for(self, site_path: Path) -> list[ValetDriver]:
        """Full check order for one site, project-local driver included."""
        return [
            *self._builtins,
            *self.local_drivers(site_path),
            *self._extensions,
            *self._fallbacks,
        ]

    def assign(self, site_path: Path, site_name: str, uri: str) -> ValetDriver | None:
        """Return the first driver that serves this site, or None.

        Raises DriverFaultError if a driver's ``serves`` predicate raises.
        """
        for driver in self.chain_for(site_path):
            try:
                claimed = driver.serves(site_path, site_name, uri)
            except Exception as exc:
                raise DriverFaultError(driver.name, "serves", exc) from exc
            if claimed:
                return driver
        return None
