"""Error taxonomy for request handling.

INVARIANT: The serving harness only ever sees ValetError subclasses.
"not found" is not an error: it is a NotFoundDecision returned by the
dispatcher.
"""

from __future__ import annotations

from pathlib import Path


class ValetError(Exception):
    """Base class for every error the core raises."""

    code: str = "VALET_ERROR"


class ConfigurationInvalidError(ValetError):
    """The config store is missing, unparseable, or lacks required fields."""

    code = "CONFIGURATION_INVALID"

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class DriverFaultError(ValetError):
    """A driver raised while answering a predicate or path question."""

    code = "DRIVER_FAULT"

    def __init__(self, driver: str, stage: str, original: BaseException) -> None:
        super().__init__(f"Driver {driver} failed during {stage}: {original}")
        self.driver = driver
        self.stage = stage
        self.original = original


class FrontControllerError(ValetError):
    """The dynamic front controller could not be executed."""

    code = "FRONT_CONTROLLER_FAILED"

    def __init__(self, message: str, *, script: Path | None = None) -> None:
        super().__init__(message)
        self.script = script
