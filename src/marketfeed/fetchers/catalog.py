"""Static asset catalog fetched by the batch orchestrator."""

from dataclasses import dataclass

from marketfeed.models import AssetType


@dataclass(frozen=True)
class ForexPair:
    from_currency: str
    to_currency: str
    name: str

    @property
    def id(self) -> str:
        return f"{self.from_currency}{self.to_currency}"

    @property
    def symbol(self) -> str:
        return f"{self.from_currency}/{self.to_currency}"


@dataclass(frozen=True)
class Commodity:
    symbol: str
    name: str
    slug: str


@dataclass(frozen=True)
class Cryptocurrency:
    id: str  # CoinGecko coin id
    name: str
    symbol: str  # exchange ticker


@dataclass(frozen=True)
class CatalogAsset:
    """Identity of a catalog entry, independent of any provider."""

    id: str
    symbol: str
    name: str
    type: AssetType


FOREX_PAIRS: list[ForexPair] = [
    ForexPair("EUR", "USD", "Euro / US Dollar"),
    ForexPair("GBP", "USD", "British Pound / US Dollar"),
    ForexPair("USD", "JPY", "US Dollar / Japanese Yen"),
    ForexPair("USD", "CHF", "US Dollar / Swiss Franc"),
    ForexPair("AUD", "USD", "Australian Dollar / US Dollar"),
    ForexPair("USD", "CAD", "US Dollar / Canadian Dollar"),
]

COMMODITIES: list[Commodity] = [
    Commodity("XAUUSD", "Gold", "gold"),
    Commodity("XAGUSD", "Silver", "silver"),
]

CRYPTOCURRENCIES: list[Cryptocurrency] = [
    Cryptocurrency("bitcoin", "Bitcoin", "BTC"),
    Cryptocurrency("ethereum", "Ethereum", "ETH"),
    Cryptocurrency("cardano", "Cardano", "ADA"),
    Cryptocurrency("ripple", "Ripple", "XRP"),
]


def forex_identity(from_currency: str, to_currency: str) -> CatalogAsset:
    base, quote = from_currency.upper(), to_currency.upper()
    return CatalogAsset(
        id=f"{base}{quote}",
        symbol=f"{base}/{quote}",
        name=f"{base} to {quote}",
        type=AssetType.FOREX,
    )


def crypto_identity(coin_id: str) -> CatalogAsset:
    """Catalog ticker and name when known, else derived from the coin id."""
    for coin in CRYPTOCURRENCIES:
        if coin.id == coin_id:
            return CatalogAsset(coin.id, coin.symbol, coin.name, AssetType.CRYPTO)
    return CatalogAsset(
        id=coin_id,
        symbol=coin_id.upper(),
        name=coin_id[:1].upper() + coin_id[1:],
        type=AssetType.CRYPTO,
    )


def find_catalog_asset(asset_id: str) -> CatalogAsset | None:
    """Look up a catalog entry by asset id (``EURUSD``, ``XAUUSD``, ``bitcoin``)."""
    for pair in FOREX_PAIRS:
        if pair.id == asset_id:
            return forex_identity(pair.from_currency, pair.to_currency)
    for commodity in COMMODITIES:
        if commodity.symbol == asset_id:
            return CatalogAsset(
                commodity.symbol, commodity.symbol, commodity.name, AssetType.COMMODITY
            )
    for coin in CRYPTOCURRENCIES:
        if coin.id == asset_id:
            return crypto_identity(coin.id)
    return None
