"""Metal Price API adapter: gold and silver spot prices."""

from marketfeed.models import AssetClass
from marketfeed.providers.base import ProviderAdapter
from marketfeed.providers.types import FetchRequest, ProviderResult

#: Commodity symbol -> key in the Metal Price API payload.
METAL_KEYS: dict[str, str] = {
    "XAUUSD": "gold",
    "XAGUSD": "silver",
}


class MetalPriceAdapter(ProviderAdapter):
    """Specialized commodity source that only knows the two metals in METAL_KEYS."""

    provider_id = "METAL_PRICE"
    display_name = "Metal Price API"

    def supports(self, request: FetchRequest) -> bool:
        return (
            request.asset_class is AssetClass.COMMODITY
            and request.symbol.upper() in METAL_KEYS
        )

    async def fetch(self, request: FetchRequest) -> ProviderResult:
        params = {"api_key": self.api_key} if self.api_key else None
        response = await self._get(self._settings.base_url, params=params)
        if response.is_error:
            return self._status_failure(response)

        data = self._decode(response)
        if isinstance(data, dict) and data.get("error"):
            return ProviderResult.failure(self.provider_id, str(data["error"]))

        return ProviderResult.success(self.provider_id, data)
