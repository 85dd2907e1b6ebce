from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from src.utils.config import DEFAULT_BASE_URL
from src.utils.logging import get_logger


logger = get_logger(component="api_client")

# Sub-paths the REST Countries API exposes for filtered lookups.
FILTER_PATHS = ("name", "region", "capital", "language")


class APIClientError(Exception):
    pass


class NetworkError(APIClientError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseError(APIClientError):
    pass


class InvalidParameterError(APIClientError):
    pass


class CountriesAPIClient:
    """
    REST Countries client
    - GET-only
    - Async httpx
    - Returns the raw JSON array; normalization lives in transforms.countries
    """

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = float(timeout_seconds)
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=transport,
        )

    async def __aenter__(self) -> CountriesAPIClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_all(self) -> list[dict[str, Any]]:
        return await self._get_array("/all")

    async def fetch_by_filter(self, kind: str, term: str) -> list[dict[str, Any]]:
        if kind not in FILTER_PATHS:
            raise InvalidParameterError(f"Invalid parameter: {kind!r}")
        # The term is a single path segment; slashes must not open new segments.
        return await self._get_array(f"/{kind}/{quote(term, safe='')}")

    async def _get_array(self, endpoint: str) -> list[dict[str, Any]]:
        try:
            resp = await self._client.get(endpoint)
        except httpx.TimeoutException as e:
            raise NetworkError("Request timeout") from e
        except httpx.RequestError as e:
            raise NetworkError(f"Request error: {e}") from e

        if not resp.is_success:
            logger.info("countries_request_failed", endpoint=endpoint, status_code=resp.status_code)
            raise NetworkError(f"Response status: {resp.status_code}", status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            raise ParseError("Failed to parse JSON") from e

        if not isinstance(data, list):
            raise ParseError(f"Expected a JSON array from {endpoint}, got {type(data).__name__}")

        logger.debug("countries_request_ok", endpoint=endpoint, items=len(data))
        return data
