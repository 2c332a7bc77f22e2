"""Twelve Data adapter: ``/quote`` endpoint for forex pairs and crypto tickers."""

from marketfeed.models import AssetClass
from marketfeed.providers.base import ProviderAdapter
from marketfeed.providers.types import FetchRequest, ProviderResult


class TwelveDataAdapter(ProviderAdapter):
    """Secondary forex/crypto source.

    Errors come back with HTTP 200 and ``{"status": "error", "message": ...}``;
    anything other than ``status == "ok"`` is treated as a failure.
    """

    provider_id = "TWELVE_DATA"
    display_name = "Twelve Data"

    def supports(self, request: FetchRequest) -> bool:
        if request.asset_class is AssetClass.FOREX:
            return request.currency_pair is not None
        return request.asset_class is AssetClass.CRYPTO

    async def fetch(self, request: FetchRequest) -> ProviderResult:
        if request.asset_class is AssetClass.CRYPTO:
            ticker = request.ticker or request.symbol
            params = {"symbol": f"{ticker.upper()}/USD", "exchange": "CRYPTO"}
        else:
            base, quote = request.currency_pair or ("", "")
            params = {"symbol": f"{base}/{quote}", "exchange": "FOREX"}
        params["apikey"] = self.api_key

        response = await self._get(f"{self._settings.base_url}/quote", params=params)
        if response.is_error:
            return self._status_failure(response)

        data = self._decode(response)
        if not isinstance(data, dict) or data.get("status") != "ok":
            message = data.get("message") if isinstance(data, dict) else None
            return ProviderResult.failure(
                self.provider_id, message or "Twelve Data returned a non-ok status"
            )

        return ProviderResult.success(self.provider_id, data)
