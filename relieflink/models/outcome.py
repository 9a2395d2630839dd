"""Tagged provider outcomes.

Every provider function returns either :class:`Success` or :class:`Failure`
instead of raising.  The fallback resolver inspects the tag, and the
enrichment wrapper only ever caches a ``Success``.

These are plain frozen dataclasses rather than Pydantic models: they are
transient values passed between services and never serialised.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

from relieflink.utils.errors import AllProvidersFailedError

T = TypeVar("T")


class FailureKind(str, Enum):
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    MALFORMED_RESPONSE = "malformed_response"
    TIMEOUT = "timeout"
    ALL_PROVIDERS_FAILED = "all_providers_failed"


@dataclass(frozen=True)
class Success(Generic[T]):
    """A provider answered with a usable payload.

    ``cached`` is ``True`` when the payload was served from the cache store
    rather than by invoking ``provider``.
    """

    payload: T
    provider: str
    cached: bool = False

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.payload


@dataclass(frozen=True)
class Failure:
    """A provider (or a whole chain) could not produce a payload.

    For an aggregate failure ``kind`` is ``ALL_PROVIDERS_FAILED`` and
    ``causes`` holds each provider's own failure in the order tried.
    """

    kind: FailureKind
    reason: str
    provider: str | None = None
    causes: tuple[Failure, ...] = ()

    @property
    def ok(self) -> bool:
        return False

    @property
    def reasons(self) -> list[str]:
        """Flattened ``"<provider>: <reason>"`` strings for every cause."""
        if not self.causes:
            return [f"{self.provider or 'unknown'}: {self.reason}"]
        return [reason for cause in self.causes for reason in cause.reasons]

    def unwrap(self) -> None:
        raise AllProvidersFailedError(self)

    @classmethod
    def aggregate(cls, causes: list[Failure], reason: str = "All providers failed") -> Failure:
        return cls(kind=FailureKind.ALL_PROVIDERS_FAILED, reason=reason, causes=tuple(causes))


Outcome = Union[Success[T], Failure]
