"""Ordered provider fallback for one data domain."""
import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

import httpx

from market_alerts.errors import AllProvidersFailed, ProviderUnavailable

logger = logging.getLogger(__name__)

P = TypeVar("P")
T = TypeVar("T")

# Exceptions that mean "this provider is unavailable"; all others propagate (e.g. bugs).
_PROVIDER_EXCEPTIONS: tuple[type[Exception], ...] = (
    ProviderUnavailable,
    httpx.HTTPError,
    ValueError,
    KeyError,
    TypeError,
    ArithmeticError,
    TimeoutError,
    asyncio.TimeoutError,
    OSError,
    NotImplementedError,
)


@dataclass(frozen=True)
class Resolution(Generic[T]):
    """A successful chain resolution and the failures that preceded it."""

    value: T
    provider: str
    failures: tuple[ProviderUnavailable, ...] = ()


def _provider_name(provider: object) -> str:
    return getattr(provider, "name", None) or type(provider).__name__


def _describe(exc: Exception, timeout: float) -> str:
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError)):
        return f"timed out after {timeout:g}s"
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP {exc.response.status_code}"
    return str(exc) or type(exc).__name__


class ProviderChain(Generic[P]):
    """Tries each provider in order and returns the first well-formed result.

    Every provider failure (credentials, timeout, rate limit, HTTP error,
    malformed payload, failed validation) is recorded as ProviderUnavailable
    and the next provider is tried. When all fail, AllProvidersFailed carries
    every failure for diagnostics.
    """

    def __init__(
        self,
        domain: str,
        providers: Sequence[P],
        *,
        timeout_seconds: float = 10.0,
    ) -> None:
        """Initialize the chain.

        Args:
            domain: Label for logs and errors (e.g. "currency", "stock").
            providers: Provider adapters in priority order.
            timeout_seconds: Hard budget for a single provider call.
        """
        self._domain = domain
        self._providers = list(providers)
        self._timeout = timeout_seconds

    @property
    def domain(self) -> str:
        return self._domain

    @property
    def providers(self) -> list[P]:
        return list(self._providers)

    async def resolve(
        self,
        call: Callable[[P], Awaitable[T]],
        *,
        validate: Callable[[T], None] | None = None,
        label: str = "",
    ) -> Resolution[T]:
        """Run call(provider) against each provider until one succeeds.

        Args:
            call: Async function issuing the query against one provider.
            validate: Optional domain check; raising ValueError marks the result malformed.
            label: Query description for logs (e.g. "rates:USD").

        Returns:
            Resolution with the value, the provider name, and earlier failures.

        Raises:
            AllProvidersFailed: If no provider produced a valid result.
        """
        failures: list[ProviderUnavailable] = []
        for provider in self._providers:
            name = _provider_name(provider)
            try:
                value = await asyncio.wait_for(call(provider), timeout=self._timeout)
                if validate is not None:
                    validate(value)
            except _PROVIDER_EXCEPTIONS as exc:
                failure = (
                    exc
                    if isinstance(exc, ProviderUnavailable)
                    else ProviderUnavailable(name, _describe(exc, self._timeout))
                )
                failures.append(failure)
                logger.warning(
                    "%s provider %s failed for %s: %s",
                    self._domain, name, label or "query", failure.reason,
                )
                continue
            if failures:
                logger.info(
                    "%s %s resolved by %s after %d failed provider(s)",
                    self._domain, label or "query", name, len(failures),
                )
            return Resolution(value=value, provider=name, failures=tuple(failures))
        raise AllProvidersFailed(self._domain, failures)

    async def close(self) -> None:
        """Close every provider; errors are logged, not raised."""
        for provider in self._providers:
            close = getattr(provider, "close", None)
            if close is None:
                continue
            try:
                await close()
            except Exception as exc:  # pylint: disable=broad-except
                logger.warning(
                    "Error closing provider %s: %s", _provider_name(provider), exc
                )
