"""Tagged results for cache facade operations.

Every facade operation has a ``*_result`` variant returning either
``Ok(value)`` or ``Degraded(reason)``. Callers that care whether the cache
is healthy can branch on the tag; everyone else uses the plain methods,
which collapse ``Degraded`` into ``None``.

Example:
    match await cache.get_result("key"):
        case Ok(value=None):
            ...  # miss
        case Ok(value=value):
            ...  # hit
        case Degraded(reason=reason):
            logger.info("Cache degraded: %s", reason.message)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class DegradedReason:
    """Why a cache operation could not complete."""

    operation: str
    key: str | None
    error_kind: str
    message: str


@dataclass(frozen=True, slots=True)
class Ok:
    """The provider completed the operation. ``value`` is ``None`` on a miss."""

    value: Any = None

    @property
    def degraded(self) -> bool:
        return False

    def unwrap_or(self, default: Any = None) -> Any:
        return self.value


@dataclass(frozen=True, slots=True)
class Degraded:
    """The provider failed; the failure was logged and absorbed."""

    reason: DegradedReason

    @property
    def degraded(self) -> bool:
        return True

    def unwrap_or(self, default: Any = None) -> Any:
        return default


CacheResult = Ok | Degraded
