"""Sequential provider fallback.

Architecture: Fallback Chain Pattern
-------------------------------------
Providers are tried strictly in the order supplied, one at a time.  The
first ``Success`` short-circuits the chain; later providers are never
invoked.  A ``Failure`` (or a timeout) is logged and the next provider is
tried.  When every provider fails the caller receives one aggregate
``Failure`` whose ``causes`` list each provider's reason in order.

Providers are never run concurrently (rate limits and cost) and are never
retried here; a caller wanting retries wraps the provider function.

Cancellation of the awaiting task propagates into the provider call that is
in flight and stops the iteration; ``asyncio.CancelledError`` is never
caught.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

import structlog

from relieflink.models.outcome import Failure, FailureKind, Outcome, Success
from relieflink.utils.logging import get_logger

RequestT = TypeVar("RequestT")
PayloadT = TypeVar("PayloadT")

# Anything awaitable-callable returning an Outcome qualifies: IProvider
# instances, bound methods, or plain ``async def`` functions in tests.
ProviderFn = Callable[[RequestT], Awaitable[Outcome[PayloadT]]]

_DEFAULT_TIMEOUT_SECONDS = 10.0


def provider_name(provider: Any) -> str:
    """Best-effort display name for a provider callable."""
    name = getattr(provider, "name", None)
    if isinstance(name, str) and name:
        return name
    return getattr(provider, "__name__", None) or type(provider).__name__


class FallbackResolver:
    """Runs an ordered provider chain for one enrichment kind.

    Parameters
    ----------
    kind:
        Label used in log records, e.g. ``"geocode"``.
    timeout:
        Default per-provider timeout in seconds.  A provider exposing a
        numeric ``timeout`` attribute overrides it.
    """

    def __init__(self, kind: str, timeout: float = _DEFAULT_TIMEOUT_SECONDS) -> None:
        if timeout <= 0:
            msg = f"Provider timeout must be positive, got {timeout}"
            raise ValueError(msg)
        self._kind = kind
        self._timeout = timeout
        self._logger: structlog.BoundLogger = get_logger(__name__).bind(kind=kind)

    @property
    def kind(self) -> str:
        return self._kind

    async def resolve(
        self,
        request: RequestT,
        providers: Sequence[ProviderFn[RequestT, PayloadT]],
    ) -> Outcome[PayloadT]:
        """Return the first provider success, or an aggregate failure."""
        failures: list[Failure] = []

        for provider in providers:
            name = provider_name(provider)
            outcome = await self._invoke(provider, name, request)

            if isinstance(outcome, Success):
                self._logger.info(
                    "provider_succeeded",
                    provider=outcome.provider,
                    attempts=len(failures) + 1,
                )
                return outcome

            failures.append(outcome)
            self._logger.warning(
                "provider_failed",
                provider=outcome.provider or name,
                failure_kind=outcome.kind.value,
                reason=outcome.reason,
            )

        aggregate = Failure.aggregate(
            failures,
            reason=(
                f"All {len(failures)} {self._kind} providers failed"
                if failures
                else f"No {self._kind} providers configured"
            ),
        )
        self._logger.warning("all_providers_failed", reasons=aggregate.reasons)
        return aggregate

    async def _invoke(
        self,
        provider: ProviderFn[RequestT, PayloadT],
        name: str,
        request: RequestT,
    ) -> Outcome[PayloadT]:
        """Call one provider under its timeout, normalising every failure mode."""
        timeout = getattr(provider, "timeout", None) or self._timeout
        started = time.perf_counter()
        try:
            outcome = await asyncio.wait_for(provider(request), timeout=timeout)
        except asyncio.TimeoutError:
            return Failure(
                kind=FailureKind.TIMEOUT,
                reason=f"no answer within {timeout:g}s",
                provider=name,
            )
        except Exception as exc:  # noqa: BLE001 - a buggy provider must not break the chain
            return Failure(
                kind=FailureKind.PROVIDER_UNAVAILABLE,
                reason=f"{type(exc).__name__}: {exc}",
                provider=name,
            )

        if not isinstance(outcome, (Success, Failure)):
            return Failure(
                kind=FailureKind.MALFORMED_RESPONSE,
                reason=f"provider returned {type(outcome).__name__}, not an Outcome",
                provider=name,
            )

        self._logger.debug(
            "provider_returned",
            provider=name,
            ok=outcome.ok,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return outcome
