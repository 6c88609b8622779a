"""Config store discovery and loading.

The store lives at ``<home>/config.json``. ``VALET_CONFIG`` points at a
different file. The file is read on every call; nothing is cached, so
edits take effect on the very next request.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from valetpy.config.models import SiteConfig
from valetpy.errors import ConfigurationInvalidError

CONFIG_FILENAME = "config.json"
CONFIG_ENV_VAR = "VALET_CONFIG"
HOME_ENV_VAR = "VALET_HOME"
DEFAULT_HOME = Path("~/.valet")


def default_home() -> Path:
    """Return ``$VALET_HOME`` or ``~/.valet``, user-expanded."""
    env_home = os.environ.get(HOME_ENV_VAR)
    return Path(env_home).expanduser() if env_home else DEFAULT_HOME.expanduser()


def find_config(home: Path | None = None) -> Path:
    """Locate the config store.

    Checks ``VALET_CONFIG`` first, then ``<home>/config.json``. The path is
    returned whether or not it exists; :func:`load_site_config` reports a
    missing file.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return (home or default_home()) / CONFIG_FILENAME


def load_site_config(path: Path) -> SiteConfig:
    """Read and validate the config store at *path*.

    Raises ConfigurationInvalidError if the file is missing, is not valid
    JSON, or lacks ``domain``/``paths``.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        msg = f"Config file not found: {path}"
        raise ConfigurationInvalidError(msg, path=path) from exc
    except OSError as exc:
        msg = f"Config file unreadable: {path}: {exc}"
        raise ConfigurationInvalidError(msg, path=path) from exc

    try:
        data: Any = json.loads(raw)
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON in {path}: {exc}"
        raise ConfigurationInvalidError(msg, path=path) from exc

    if not isinstance(data, dict):
        msg = f"Config in {path} must be a JSON object"
        raise ConfigurationInvalidError(msg, path=path)

    try:
        return SiteConfig.model_validate(data)
    except ValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
        msg = f"Invalid config in {path}: {fields}"
        raise ConfigurationInvalidError(msg, path=path) from exc
