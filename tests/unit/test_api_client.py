from __future__ import annotations

import json
import os
from pathlib import Path

import httpx
import pytest

from src.collector.api_client import CountriesAPIClient, InvalidParameterError, NetworkError, ParseError


def _sample() -> list[dict]:
    p = Path(__file__).resolve().parents[1] / "fixtures" / "api_responses" / "countries_sample.json"
    return json.loads(p.read_text(encoding="utf-8"))


def _client(handler) -> CountriesAPIClient:
    return CountriesAPIClient(base_url="https://restcountries.test/v3.1", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_fetch_all_hits_all_endpoint() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(200, json=_sample())

    async with _client(handler) as client:
        data = await client.fetch_all()

    assert seen == ["/v3.1/all"]
    assert [c["name"]["common"] for c in data] == ["Andorra", "Brazil", "Antarctica", "South Africa", "Spain"]


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", ["name", "region", "capital", "language"])
async def test_fetch_by_filter_builds_sub_path(kind: str) -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(200, json=[])

    async with _client(handler) as client:
        assert await client.fetch_by_filter(kind, "europe") == []

    assert seen == [f"/v3.1/{kind}/europe"]


@pytest.mark.asyncio
async def test_fetch_by_filter_keeps_term_in_one_path_segment() -> None:
    seen: list[bytes] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.raw_path)
        return httpx.Response(200, json=[])

    async with _client(handler) as client:
        await client.fetch_by_filter("name", "a/b c")

    assert seen == [b"/v3.1/name/a%2Fb%20c"]


@pytest.mark.asyncio
async def test_fetch_by_filter_rejects_unknown_kind() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    async with _client(handler) as client:
        with pytest.raises(InvalidParameterError):
            await client.fetch_by_filter("currency", "eur")


@pytest.mark.asyncio
async def test_non_success_status_raises_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"status": 404, "message": "Not Found"})

    async with _client(handler) as client:
        with pytest.raises(NetworkError) as exc_info:
            await client.fetch_by_filter("name", "atlantis")

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_transport_failure_raises_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(NetworkError) as exc_info:
            await client.fetch_all()

    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_invalid_json_raises_parse_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>not json</html>")

    async with _client(handler) as client:
        with pytest.raises(ParseError):
            await client.fetch_all()


@pytest.mark.asyncio
async def test_non_array_json_raises_parse_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"message": "unexpected"})

    async with _client(handler) as client:
        with pytest.raises(ParseError):
            await client.fetch_all()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_live_region_lookup() -> None:
    # Real API call; opt-in only.
    if os.getenv("COUNTRY_LOOKUP_LIVE") != "1":
        pytest.skip("set COUNTRY_LOOKUP_LIVE=1 to hit restcountries.com")

    async with CountriesAPIClient() as client:
        data = await client.fetch_by_filter("region", "europe")

    assert any((c.get("name") or {}).get("common") == "Spain" for c in data)
