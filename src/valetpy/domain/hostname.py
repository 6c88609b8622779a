"""Hostname parsing: raw Host header -> SiteIdentity.

Order of operations is fixed: wildcard-DNS provider suffix first, then the
configured TLD, then a single leading ``www.``.
"""

from __future__ import annotations

from collections.abc import Iterable

from valetpy.config.models import SiteConfig
from valetpy.domain.types import SiteIdentity

_PROVIDER_TRIM = ". ,"


def strip_wildcard_provider(raw_host: str, providers: Iterable[str]) -> str:
    """Remove a wildcard-DNS provider suffix such as ``.xip.io``.

    Providers are scanned in order and the LAST one that matches wins,
    each match computed against the untouched *raw_host*. If nothing
    matches, or the surviving match leaves an empty host, *raw_host* is
    returned unchanged.
    """
    filtered: str | None = None
    for provider in providers:
        provider = provider.strip(_PROVIDER_TRIM)
        if not provider:
            continue
        suffix = f".{provider}"
        if raw_host.endswith(suffix):
            filtered = raw_host[: -len(suffix)]
    return filtered or raw_host


def strip_tld(host: str, tld: str) -> str:
    """Remove ``.<tld>`` from the end of *host* when it is a proper suffix."""
    suffix = f".{tld}"
    if host.endswith(suffix) and host != suffix:
        return host[: -len(suffix)]
    return host


def resolve_site_identity(raw_host: str, config: SiteConfig) -> SiteIdentity:
    """Turn a raw Host value into a site name and a domain fallback label."""
    candidate = strip_wildcard_provider(raw_host, config.all_wildcard_providers)
    site_name = strip_tld(candidate, config.domain)
    if site_name.startswith("www."):
        site_name = site_name[4:]
    return SiteIdentity(
        site_name=site_name,
        domain_fallback=site_name.split(".")[-1],
    )
