"""Process settings — CLI flags, env vars, and code defaults in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``VALET_*`` prefix
  3. Code defaults

These settings describe the running process (where the home directory
is, which port to bind, which CGI binary runs front controllers). The
per-request site configuration is the separate JSON store loaded by
:mod:`valetpy.config.discovery`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from valetpy.config.discovery import default_home, find_config

EXTENSIONS_DIRNAME = "Extensions"
TEMPLATES_DIRNAME = "templates"


class ValetSettings(BaseSettings):
    """Unified settings for the valetpy process.

    Attributes:
        home: Valet home directory holding ``config.json`` and ``Extensions/``.
        config_path: Config store location; derived from *home* when omitted.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "VALET_",
    }

    home: Path = Field(default_factory=default_home)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- Serving harness ---
    host: str = "127.0.0.1"
    port: int = 8080
    php_cgi: str = "php-cgi"
    cgi_timeout: float = 60.0

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Init kwargs over env vars; no dotenv or secrets files."""
        return (init_settings, env_settings)

    @property
    def resolved_config_path(self) -> Path:
        """Config store path, honouring ``VALET_CONFIG`` when not set explicitly."""
        return self.config_path or find_config(self.home)

    @property
    def extensions_dir(self) -> Path:
        return self.home / EXTENSIONS_DIRNAME

    @property
    def templates_dir(self) -> Path:
        return self.home / TEMPLATES_DIRNAME

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        home: str | Path | None = None,
        **cli_flags: Any,
    ) -> ValetSettings:
        """Construct settings from a CLI invocation.

        Only flags the user actually supplied are passed on, so that
        unset options fall through to ``VALET_*`` env vars.
        """
        kwargs: dict[str, Any] = {k: v for k, v in cli_flags.items() if v is not None}
        if home is not None:
            kwargs["home"] = Path(home).expanduser()
        if config_path:
            kwargs["config_path"] = Path(config_path).expanduser()
        return cls(**kwargs)
