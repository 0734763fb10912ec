"""Contributors feature: cached contributor lists per account."""

from __future__ import annotations

from .cache import CONTRIBUTORS_KEY_PREFIX, ContributorsCache

__all__ = ["CONTRIBUTORS_KEY_PREFIX", "ContributorsCache"]
