"""Exchange Rate API adapter: latest spot rates for one base currency."""

from marketfeed.models import AssetClass
from marketfeed.providers.base import ProviderAdapter
from marketfeed.providers.types import FetchRequest, ProviderResult


class ExchangeRateAdapter(ProviderAdapter):
    """Tertiary forex-only source. Spot rates only, no previous close."""

    provider_id = "EXCHANGE_RATE"
    display_name = "Exchange Rate API"

    def supports(self, request: FetchRequest) -> bool:
        return request.asset_class is AssetClass.FOREX and request.currency_pair is not None

    async def fetch(self, request: FetchRequest) -> ProviderResult:
        base, _ = request.currency_pair or ("", "")
        response = await self._get(f"{self._settings.base_url}/{base}")
        if response.is_error:
            return self._status_failure(response)

        data = self._decode(response)
        if isinstance(data, dict) and data.get("result") == "error":
            return ProviderResult.failure(
                self.provider_id, str(data.get("error-type", "unknown error"))
            )

        return ProviderResult.success(self.provider_id, data)
