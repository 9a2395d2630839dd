"""Exception hierarchy for ReliefLink.

All application exceptions inherit from :class:`ReliefLinkError`, which
carries an optional ``provider_name`` so log records identify which
external service (e.g. "google_maps", "gemini") caused the failure.

    ReliefLinkError
    +-- ConfigurationError             (startup / missing config)
    +-- CacheUnavailableError          (cache store read/write failed)
    +-- ProviderUnavailableError       (provider unconfigured, down, timed out)
    +-- MalformedProviderResponseError (provider answered with an unusable payload)
    +-- AllProvidersFailedError        (every provider in a chain failed)
    +-- BroadcastDeliveryError         (one observer could not be reached)

Adapters raise these internally; at the provider boundary they are turned
into tagged :class:`~relieflink.models.outcome.Failure` values, so the
fallback resolver inspects results instead of catching exceptions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from relieflink.models.outcome import Failure


class ReliefLinkError(Exception):
    """Base exception for all ReliefLink errors.

    ``__str__`` prefixes the provider name in brackets, e.g.
    ``[mapbox] Mapbox geocoding returned no results``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


class ConfigurationError(ReliefLinkError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------

class CacheUnavailableError(ReliefLinkError):
    """Raised by a cache backend when its storage cannot be read or written.

    Cache consumers treat this as a miss; it never reaches a request.
    """

    def __init__(
        self,
        message: str = "Cache store is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External providers
# ---------------------------------------------------------------------------

class ProviderUnavailableError(ReliefLinkError):
    """Raised when an external provider is unconfigured, unreachable or erroring."""

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class MalformedProviderResponseError(ReliefLinkError):
    """Raised when a provider answers but the payload cannot be parsed."""

    def __init__(
        self,
        message: str = "Provider returned a malformed response",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class AllProvidersFailedError(ReliefLinkError):
    """Raised by :meth:`Failure.unwrap` when a whole fallback chain failed.

    The aggregate :class:`Failure` (with one cause per provider) is kept on
    ``failure`` so callers can report every reason.
    """

    def __init__(self, failure: Failure, message: str | None = None) -> None:
        self.failure = failure
        super().__init__(message=message or failure.reason, provider_name=failure.provider)


# ---------------------------------------------------------------------------
# Real-time delivery
# ---------------------------------------------------------------------------

class BroadcastDeliveryError(ReliefLinkError):
    """Raised by an observer handle that can no longer accept events."""

    def __init__(
        self,
        message: str = "Event delivery to observer failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
