"""Per-request values flowing through the dispatch pipeline.

Every model here is frozen. A request is parsed once into a
RequestContext and only ever transformed into new derived values;
nothing is mutated in place and nothing outlives the request.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Annotated, Literal
from urllib.parse import unquote_plus

from pydantic import BaseModel, Field


class DecisionKind(StrEnum):
    """Terminal states of the dispatch state machine."""

    STATIC = "static"
    DYNAMIC = "dynamic"
    NOT_FOUND = "not_found"


class NotFoundReason(StrEnum):
    """Which pipeline stage gave up on the request."""

    SITE = "site"
    DRIVER = "driver"
    FRONT_CONTROLLER = "front_controller"


class RequestContext(BaseModel):
    """Host and URI of one inbound request.

    ``uri`` is already stripped of its query string and percent-decoded.
    ``query_string`` is kept verbatim for the front controller.
    """

    model_config = {"frozen": True}

    host: str
    uri: str
    query_string: str = ""

    @classmethod
    def from_raw(
        cls,
        host: str,
        request_uri: str,
        *,
        original_host: str | None = None,
    ) -> RequestContext:
        """Build a context from the raw Host header and request URI.

        The path is form-decoded, so ``+`` becomes a space. A tunnelling
        proxy's ``X-Original-Host`` value, when given, replaces
        *host* for everything downstream.
        """
        path, _, query = request_uri.partition("?")
        return cls(
            host=original_host or host,
            uri=unquote_plus(path),
            query_string=query,
        )


class SiteIdentity(BaseModel):
    """Candidate project folder names derived from a hostname."""

    model_config = {"frozen": True}

    site_name: str
    domain_fallback: str


class ResolvedSite(BaseModel):
    """A project directory that matched a SiteIdentity."""

    model_config = {"frozen": True}

    path: Path
    site_name: str
    domain_fallback: str


class StaticFile(BaseModel):
    """What a driver wants written back for a static asset."""

    model_config = {"frozen": True}

    path: Path
    content_type: str
    headers: dict[str, str] = Field(default_factory=dict)


class StaticDecision(BaseModel):
    """Serve ``file_path`` as-is."""

    model_config = {"frozen": True}

    kind: Literal["static"] = "static"
    file_path: Path
    content_type: str
    headers: dict[str, str] = Field(default_factory=dict)
    driver: str
    site: ResolvedSite


class DynamicDecision(BaseModel):
    """Hand the request to ``front_controller_path``, run from ``working_dir``."""

    model_config = {"frozen": True}

    kind: Literal["dynamic"] = "dynamic"
    front_controller_path: Path
    working_dir: Path
    document_root: Path
    driver: str
    site: ResolvedSite
    uri: str


class NotFoundDecision(BaseModel):
    """No site, no driver, or no front controller for this request."""

    model_config = {"frozen": True}

    kind: Literal["not_found"] = "not_found"
    reason: NotFoundReason


DispatchDecision = Annotated[
    StaticDecision | DynamicDecision | NotFoundDecision,
    Field(discriminator="kind"),
]
