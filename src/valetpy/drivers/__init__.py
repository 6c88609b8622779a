"""Driver layer — the driver interface, built-in drivers, and the registry.

Discovery sources: built-ins, a project-local ``valet_driver.py``, the
``<home>/Extensions`` directory, and ``valetpy.drivers`` entry points.
"""

from valetpy.drivers.base import ValetDriver
from valetpy.drivers.builtins import BasicValetDriver
from valetpy.drivers.hookspecs import hookimpl
from valetpy.drivers.registry import DriverRegistry

__all__ = ["BasicValetDriver", "DriverRegistry", "ValetDriver", "hookimpl"]
