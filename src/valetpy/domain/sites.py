"""Site directory lookup across the configured root paths."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from valetpy.domain.types import ResolvedSite, SiteIdentity

logger = logging.getLogger(__name__)


def _candidate_dir(root: Path, name: str) -> Path | None:
    # An empty or dotted name would point at the root itself or its parent.
    if not name or name in {".", ".."} or "/" in name:
        return None
    candidate = root / name
    try:
        return candidate if candidate.is_dir() else None
    except OSError as exc:
        # Over-long names and unreadable roots are simply not a match.
        logger.debug("Skipping %s: %s", candidate, exc.strerror)
        return None


def resolve_site_path(identity: SiteIdentity, roots: Sequence[Path]) -> ResolvedSite | None:
    """Find the project directory for *identity*.

    Each root is checked for ``site_name`` and then ``domain_fallback``
    before moving on to the next root, so a domain match in an early
    root beats an exact match in a later one. The winning directory is
    canonicalized with ``Path.resolve()``.
    """
    for root in roots:
        match = _candidate_dir(root, identity.site_name) or _candidate_dir(
            root, identity.domain_fallback
        )
        if match is None:
            continue
        logger.debug("Resolved %s to %s", identity.site_name, match)
        return ResolvedSite(
            path=match.resolve(),
            site_name=identity.site_name,
            domain_fallback=identity.domain_fallback,
        )
    return None
