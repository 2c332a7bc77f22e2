"""Abstract provider adapter interface.

Each adapter wraps exactly one external data source. Fetchers depend only on
``supports`` and ``fetch``; provider-specific URLs, parameters and error
markers stay inside the concrete adapter.
"""

from abc import ABC, abstractmethod
from typing import Any

import httpx

from marketfeed.config import ProviderSettings
from marketfeed.exceptions import ProviderDataError, TransportError
from marketfeed.providers.types import FetchRequest, ProviderResult


class ProviderAdapter(ABC):
    """Abstract base class for provider adapters."""

    #: Stable identifier used for health records and priority lookup.
    provider_id: str = ""
    #: Name shown to users in ``Asset.provider``.
    display_name: str = ""

    def __init__(self, settings: ProviderSettings, http: httpx.AsyncClient) -> None:
        self._settings = settings
        self._http = http

    @property
    def settings(self) -> ProviderSettings:
        return self._settings

    @property
    def api_key(self) -> str:
        return self._settings.api_key.get_secret_value()

    @abstractmethod
    def supports(self, request: FetchRequest) -> bool:
        """Return True if this provider can serve the request's asset class and symbol."""
        ...

    @abstractmethod
    async def fetch(self, request: FetchRequest) -> ProviderResult:
        """Call the provider and return its raw payload.

        Raises:
            TransportError: the provider could not be reached.
            ProviderDataError: the response body could not be decoded.
        """
        ...

    async def _get(self, url: str, params: dict[str, str] | None = None) -> httpx.Response:
        """GET ``url``, translating httpx transport failures into TransportError."""
        try:
            return await self._http.get(url, params=params)
        except httpx.HTTPError as e:
            raise TransportError(f"{self.display_name} request failed: {e!r}") from e

    def _decode(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ProviderDataError(f"{self.display_name} returned invalid JSON") from e

    def _status_failure(self, response: httpx.Response) -> ProviderResult:
        return ProviderResult.failure(
            self.provider_id,
            f"{self.display_name} API error: {response.status_code} {response.reason_phrase}",
        )
