"""Abstract base class for upstream market data providers."""
from abc import ABC


class ProviderABC(ABC):
    """Base interface for all upstream providers.

    A provider wraps exactly one upstream API. It raises on any failure
    (missing credentials, HTTP error, rate limit, malformed payload); the
    ProviderChain owning it decides what to do next.
    """

    name: str = "provider"

    async def close(self) -> None:
        """Clean up resources (connections, clients).

        Override in subclasses if cleanup is needed.
        """

    async def __aenter__(self) -> "ProviderABC":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        """Async context manager exit - calls close()."""
        await self.close()
