"""Pydantic model for the site configuration store.

The store is a JSON document (``~/.valet/config.json`` by default)::

    {
        "domain": "test",
        "paths": ["/Users/me/Sites"],
        "wildcard_providers": ["sslip.io"]
    }

``domain`` and ``paths`` are required; older files spelling the TLD as
``tld`` are accepted too.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, BaseModel, Field, field_validator

BUILTIN_WILDCARD_PROVIDERS: tuple[str, ...] = ("xip.io", "nip.io")


class SiteConfig(BaseModel):
    """Read-only snapshot of the config store for a single request."""

    model_config = {"frozen": True, "populate_by_name": True}

    domain: str = Field(validation_alias=AliasChoices("domain", "tld"))
    paths: list[Path]
    wildcard_providers: list[str] = Field(default_factory=list)

    @field_validator("domain")
    @classmethod
    def _domain_not_blank(cls, value: str) -> str:
        value = value.strip().strip(".")
        if not value:
            msg = "domain must not be empty"
            raise ValueError(msg)
        return value

    @property
    def all_wildcard_providers(self) -> list[str]:
        """Built-in providers followed by the configured ones, in scan order."""
        return [*BUILTIN_WILDCARD_PROVIDERS, *self.wildcard_providers]
