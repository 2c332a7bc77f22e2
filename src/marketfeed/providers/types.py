"""Request and result types exchanged between fetchers and provider adapters."""

from dataclasses import dataclass
from typing import Any

from marketfeed.models import AssetClass, AssetType


@dataclass(frozen=True)
class FetchRequest:
    """One logical request handed down the fallback chain.

    ``symbol`` is the pair ("EUR/USD"), commodity symbol ("XAUUSD"), coin id
    ("bitcoin") or, for history, the asset's display symbol. ``ticker`` is the
    exchange ticker of a crypto asset ("BTC") when known.
    """

    asset_class: AssetClass
    symbol: str
    asset_id: str = ""
    asset_type: AssetType | None = None
    ticker: str = ""
    period: str = "7d"

    @property
    def currency_pair(self) -> tuple[str, str] | None:
        """Split the symbol into (base, quote) currency codes if possible.

        Accepts "EUR/USD" and six-letter forms such as "XAUUSD".
        """
        if "/" in self.symbol:
            base, _, quote = self.symbol.partition("/")
        elif len(self.symbol) == 6 and self.symbol.isalpha():
            base, quote = self.symbol[:3], self.symbol[3:]
        else:
            return None
        if not base or not quote:
            return None
        return base.upper(), quote.upper()

    def describe(self) -> str:
        if self.asset_class is AssetClass.HISTORY:
            return f"history {self.asset_id or self.symbol} ({self.period})"
        return f"{self.asset_class.value} {self.symbol}"


@dataclass(frozen=True)
class ProviderResult:
    """Outcome of one adapter call.

    Expected failures (HTTP error status, rate-limit notice, embedded error
    message) are returned as a result with ``error`` set instead of raised.
    """

    provider_id: str
    payload: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, provider_id: str, payload: Any) -> "ProviderResult":
        return cls(provider_id=provider_id, payload=payload)

    @classmethod
    def failure(cls, provider_id: str, error: str) -> "ProviderResult":
        return cls(provider_id=provider_id, error=error)
