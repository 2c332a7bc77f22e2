"""Shared data models for the market feed.

All prices and changes use Decimal and are serialised as strings, so a cached
record reads back exactly as it was written. Dict keys use the camelCase wire
names the UI layer consumes.
"""

import time
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any


def now_ms() -> int:
    """Current wall-clock time in Unix milliseconds."""
    return int(time.time() * 1000)


class AssetType(str, Enum):
    """Asset class of a normalized quote."""

    FOREX = "forex"
    COMMODITY = "commodity"
    CRYPTO = "crypto"


class AssetClass(str, Enum):
    """Kind of request a provider adapter can serve."""

    FOREX = "forex"
    COMMODITY = "commodity"
    CRYPTO = "crypto"
    HISTORY = "history"


class SignalDirection(str, Enum):
    """Indicator recommendation."""

    BUY = "buy"
    SELL = "sell"
    NEUTRAL = "neutral"


@dataclass
class Asset:
    """Normalized quote record.

    ``change_24h`` and ``change_24h_percent`` are zero when the provider only
    reports a spot price; they are never missing.
    """

    id: str
    symbol: str
    name: str
    type: AssetType
    price: Decimal
    change_24h: Decimal = Decimal("0")
    change_24h_percent: Decimal = Decimal("0")
    last_updated: int = field(default_factory=now_ms)  # Unix milliseconds
    provider: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "symbol": self.symbol,
            "name": self.name,
            "type": self.type.value,
            "price": str(self.price),
            "change24h": str(self.change_24h),
            "change24hPercent": str(self.change_24h_percent),
            "lastUpdated": self.last_updated,
            "provider": self.provider,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Asset":
        return cls(
            id=data["id"],
            symbol=data["symbol"],
            name=data["name"],
            type=AssetType(data["type"]),
            price=Decimal(str(data["price"])),
            change_24h=Decimal(str(data.get("change24h", "0"))),
            change_24h_percent=Decimal(str(data.get("change24hPercent", "0"))),
            last_updated=int(data["lastUpdated"]),
            provider=data.get("provider", ""),
        )


@dataclass
class HistoricalBar:
    """One OHLCV bar. ``volume`` is zero when the provider has none."""

    timestamp: int  # Unix milliseconds
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal = Decimal("0")

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "open": str(self.open),
            "high": str(self.high),
            "low": str(self.low),
            "close": str(self.close),
            "volume": str(self.volume),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HistoricalBar":
        return cls(
            timestamp=int(data["timestamp"]),
            open=Decimal(str(data["open"])),
            high=Decimal(str(data["high"])),
            low=Decimal(str(data["low"])),
            close=Decimal(str(data["close"])),
            volume=Decimal(str(data.get("volume", "0"))),
        )


@dataclass
class ProviderHealth:
    """Rolling health record of one provider.

    Invariant after every update: ``is_healthy == (failure_count < 3)``.
    """

    provider: str
    is_healthy: bool = True
    last_checked: int = field(default_factory=now_ms)
    failure_count: int = 0
    success_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": self.provider,
            "isHealthy": self.is_healthy,
            "lastChecked": self.last_checked,
            "failureCount": self.failure_count,
            "successCount": self.success_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProviderHealth":
        return cls(
            provider=data["provider"],
            is_healthy=bool(data["isHealthy"]),
            last_checked=int(data["lastChecked"]),
            failure_count=int(data["failureCount"]),
            success_count=int(data["successCount"]),
        )


@dataclass
class IndicatorSignal:
    """Buy/sell/neutral reading of one technical indicator for one asset."""

    asset_id: str
    asset_symbol: str
    asset_type: AssetType
    asset_name: str
    indicator_name: str
    signal: SignalDirection
    strength: Decimal  # 0-100
    value: Decimal
    timestamp: int
    provider: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "assetId": self.asset_id,
            "assetSymbol": self.asset_symbol,
            "assetType": self.asset_type.value,
            "assetName": self.asset_name,
            "indicatorName": self.indicator_name,
            "signal": self.signal.value,
            "strength": str(self.strength),
            "value": str(self.value),
            "timestamp": self.timestamp,
            "provider": self.provider,
        }
