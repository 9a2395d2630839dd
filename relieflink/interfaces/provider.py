"""Base class for providers taking part in a fallback chain.

A provider is an awaitable callable ``request -> Outcome``.  Concrete
adapters implement :meth:`IProvider.fetch`, which may raise; the base
:meth:`IProvider.__call__` turns configuration gaps and adapter exceptions
into tagged :class:`Failure` values so the resolver never has to catch
anything.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

import httpx
from pydantic import ValidationError

from relieflink.models.outcome import Failure, FailureKind, Outcome, Success
from relieflink.utils.errors import MalformedProviderResponseError, ProviderUnavailableError

RequestT = TypeVar("RequestT")
PayloadT = TypeVar("PayloadT")


class IProvider(ABC, Generic[RequestT, PayloadT]):
    """Contract shared by geocoding, analysis and extraction providers."""

    # Per-provider timeout in seconds; ``None`` defers to the resolver default.
    timeout: float | None = None

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the provenance tag recorded on successful results."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider has the configuration it needs.

        Must not perform network I/O.  An unavailable provider fails fast.
        """

    @abstractmethod
    async def fetch(self, request: RequestT) -> PayloadT:
        """Call the external service and return its parsed payload.

        Raises
        ------
        ProviderUnavailableError
            Transport error, non-success status or empty result set.
        MalformedProviderResponseError
            The service answered but the payload has the wrong shape.
        """

    @property
    def name(self) -> str:
        return self.get_provider_name()

    async def __call__(self, request: RequestT) -> Outcome[PayloadT]:
        name = self.get_provider_name()
        if not self.is_available():
            return Failure(
                kind=FailureKind.PROVIDER_UNAVAILABLE,
                reason=f"{name} is not configured",
                provider=name,
            )

        try:
            payload = await self.fetch(request)
        except (MalformedProviderResponseError, ValidationError, ValueError, KeyError) as exc:
            return Failure(kind=FailureKind.MALFORMED_RESPONSE, reason=str(exc), provider=name)
        except httpx.TimeoutException as exc:
            return Failure(
                kind=FailureKind.TIMEOUT,
                reason=f"request timed out: {exc}",
                provider=name,
            )
        except (ProviderUnavailableError, httpx.HTTPError) as exc:
            return Failure(kind=FailureKind.PROVIDER_UNAVAILABLE, reason=str(exc), provider=name)

        return Success(payload=payload, provider=name)
