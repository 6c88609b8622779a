"""Pluggy hook specification for drivers shipped by installed packages.

A package advertises a plugin under the ``valetpy.drivers`` entry-point
group; the plugin implements ``register_drivers`` and returns driver
instances in the order they should be checked::

    hookimpl = pluggy.HookimplMarker("valetpy")

    class CraftDrivers:
        @hookimpl
        def register_drivers(self):
            return [CraftValetDriver()]
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from valetpy.drivers.base import ValetDriver

PROJECT_NAME = "valetpy"
ENTRY_POINT_GROUP = "valetpy.drivers"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class ValetHookSpec:
    """Hook specifications for the valetpy plugin system."""

    @hookspec
    def register_drivers(self) -> list[ValetDriver] | None:
        """Return driver instances to add to the registry."""
