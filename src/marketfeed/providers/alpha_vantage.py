"""Alpha Vantage adapter: realtime currency exchange rates and FX daily series.

Commodities quoted as currency pairs (XAU/USD, XAG/USD) go through the same
CURRENCY_EXCHANGE_RATE function. Alpha Vantage signals rate limiting and bad
requests inside an HTTP 200 body via ``Note``, ``Information`` or
``Error Message`` keys.
"""

from marketfeed.models import AssetClass, AssetType
from marketfeed.providers.base import ProviderAdapter
from marketfeed.providers.types import FetchRequest, ProviderResult

_ERROR_MARKERS = ("Note", "Error Message", "Information")


class AlphaVantageAdapter(ProviderAdapter):
    """Primary forex/commodity source."""

    provider_id = "ALPHA_VANTAGE"
    display_name = "Alpha Vantage"

    def supports(self, request: FetchRequest) -> bool:
        if request.currency_pair is None:
            return False
        if request.asset_class in (AssetClass.FOREX, AssetClass.COMMODITY):
            return True
        if request.asset_class is AssetClass.HISTORY:
            return request.asset_type in (AssetType.FOREX, AssetType.COMMODITY)
        return False

    async def fetch(self, request: FetchRequest) -> ProviderResult:
        pair = request.currency_pair
        if pair is None:
            return ProviderResult.failure(
                self.provider_id, f"cannot derive currency pair from {request.symbol}"
            )
        base, quote = pair

        if request.asset_class is AssetClass.HISTORY:
            params = {
                "function": "FX_DAILY",
                "from_symbol": base,
                "to_symbol": quote,
                "outputsize": "compact",
            }
        else:
            params = {
                "function": "CURRENCY_EXCHANGE_RATE",
                "from_currency": base,
                "to_currency": quote,
            }
        params["apikey"] = self.api_key

        response = await self._get(self._settings.base_url, params=params)
        if response.is_error:
            return self._status_failure(response)

        data = self._decode(response)
        if isinstance(data, dict):
            for marker in _ERROR_MARKERS:
                if data.get(marker):
                    return ProviderResult.failure(self.provider_id, str(data[marker]))

        return ProviderResult.success(self.provider_id, data)
