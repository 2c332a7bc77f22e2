"""CoinGecko adapter: simple price and market chart endpoints, no API key."""

from marketfeed.models import AssetClass, AssetType
from marketfeed.providers.base import ProviderAdapter
from marketfeed.providers.types import FetchRequest, ProviderResult

#: History period -> number of days requested from the market chart endpoint.
PERIOD_DAYS: dict[str, int] = {"1d": 1, "7d": 7, "30d": 30}
DEFAULT_DAYS = 7


def period_to_days(period: str) -> int:
    return PERIOD_DAYS.get(period, DEFAULT_DAYS)


class CoinGeckoAdapter(ProviderAdapter):
    """Crypto-only source."""

    provider_id = "COINGECKO"
    display_name = "CoinGecko"

    def supports(self, request: FetchRequest) -> bool:
        if request.asset_class is AssetClass.CRYPTO:
            return True
        return (
            request.asset_class is AssetClass.HISTORY
            and request.asset_type is AssetType.CRYPTO
        )

    async def fetch(self, request: FetchRequest) -> ProviderResult:
        if request.asset_class is AssetClass.HISTORY:
            coin_id = request.asset_id or request.symbol.lower()
            url = f"{self._settings.base_url}/coins/{coin_id}/market_chart"
            params = {"vs_currency": "usd", "days": str(period_to_days(request.period))}
        else:
            url = f"{self._settings.base_url}/simple/price"
            params = {
                "ids": request.symbol,
                "vs_currencies": "usd",
                "include_24hr_change": "true",
            }
        if self.api_key:
            params["x_cg_demo_api_key"] = self.api_key

        response = await self._get(url, params=params)
        if response.status_code == 429:
            return ProviderResult.failure(self.provider_id, "CoinGecko rate limit (HTTP 429)")
        if response.is_error:
            return self._status_failure(response)

        data = self._decode(response)
        if isinstance(data, dict) and "error" in data:
            return ProviderResult.failure(self.provider_id, str(data["error"]))

        return ProviderResult.success(self.provider_id, data)
