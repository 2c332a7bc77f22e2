"""Custom exceptions for the market feed.

Only AllProvidersExhausted crosses the public service boundary. Transport and
provider-data errors are absorbed by the fallback loop; storage errors are
absorbed by the cache and health tracker.
"""


class MarketDataError(Exception):
    """Base exception for all market feed errors."""


class TransportError(MarketDataError):
    """Raised when a provider cannot be reached or times out."""


class ProviderDataError(MarketDataError):
    """Raised when a provider response is missing fields or cannot be decoded."""


class AllProvidersExhausted(MarketDataError):
    """Raised when every ranked, applicable provider failed for a request."""

    def __init__(self, request: str, attempts: list[str] | None = None) -> None:
        self.request = request
        self.attempts = attempts or []
        detail = "; ".join(self.attempts) if self.attempts else "no applicable provider"
        super().__init__(f"All providers failed for {request}: {detail}")


class StorageError(MarketDataError):
    """Raised by key-value stores when a read or write fails."""


class UnknownAssetError(MarketDataError):
    """Raised when an asset id is not present in the catalog."""
