from __future__ import annotations

from html import escape
from typing import Any, AsyncIterator

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse

from src.collector.api_client import CountriesAPIClient
from src.page.elements import Page
from src.render.cards import (
    CARD_CONTAINER_ID,
    FILTER_SELECT_ID,
    SEARCH_INPUT_ID,
    SHOW_ALL_ID,
    CardContainer,
    CardRenderer,
    Notice,
)
from src.search.controller import CountriesFetcher, SearchController, SearchStatus
from src.search.filters import FilterKind
from src.utils.config import load_api_config
from src.utils.logging import get_logger


app = FastAPI(title="country-lookup", version="v1")
logger = get_logger(component="read_api")

_SEARCH_PARAMS = {"q", "kind"}

_KIND_LABELS = {
    FilterKind.NAME: "Name",
    FilterKind.REGION: "Region",
    FilterKind.CAPITAL: "Capital",
    FilterKind.LANGUAGE: "Language",
    FilterKind.POPULATION_GTE: "Population >=",
    FilterKind.POPULATION_LTE: "Population <=",
}


async def get_client() -> AsyncIterator[CountriesFetcher]:
    cfg = load_api_config()
    client = CountriesAPIClient(base_url=cfg.base_url, timeout_seconds=cfg.timeout_seconds)
    try:
        yield client
    finally:
        await client.aclose()


def _reject_unknown_query_params(request: Request, allowed: set[str]) -> None:
    unknown = sorted(set(request.query_params.keys()) - allowed)
    if unknown:
        raise HTTPException(
            status_code=400,
            detail={"error": "unknown_query_params", "unknown": unknown, "allowed": sorted(allowed)},
        )


async def _search(client: CountriesFetcher, q: str, kind: str) -> tuple[Page, SearchStatus]:
    page = Page.default()
    page.get(SEARCH_INPUT_ID).value = q
    page.get(FILTER_SELECT_ID).value = kind
    outcome = await SearchController(client=client, page=page).run()
    logger.info("search_served", q=q, kind=kind, status=outcome.status.value, count=outcome.count)
    return page, outcome.status


def _page_html(container: CardContainer, *, q: str, kind: str) -> str:
    options = "".join(
        f'<option value="{k.value}"{" selected" if k.value == kind else ""}>{escape(label)}</option>'
        for k, label in _KIND_LABELS.items()
    )
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\"><title>Countries</title></head><body>"
        f"{CardRenderer().template.to_html()}"
        '<form action="/" method="get">'
        f'<input id="{SEARCH_INPUT_ID}" name="q" value="{escape(q, quote=True)}">'
        f'<select id="{FILTER_SELECT_ID}" name="kind">{options}</select>'
        "</form>"
        f'<a id="{SHOW_ALL_ID}" href="/">Show all</a>'
        f"{container.to_html()}"
        "</body></html>"
    )


@app.get("/v1/health")
async def health() -> dict:
    return {"ok": True}


@app.get("/", response_class=HTMLResponse)
async def index(request: Request, q: str = "", kind: str = FilterKind.NAME.value, client: CountriesFetcher = Depends(get_client)) -> HTMLResponse:
    _reject_unknown_query_params(request, _SEARCH_PARAMS)
    page, _ = await _search(client, q, kind)
    return HTMLResponse(_page_html(page.get(CARD_CONTAINER_ID), q=q, kind=kind))


@app.get("/search", response_class=HTMLResponse)
async def search_fragment(request: Request, q: str = "", kind: str = FilterKind.NAME.value, client: CountriesFetcher = Depends(get_client)) -> HTMLResponse:
    _reject_unknown_query_params(request, _SEARCH_PARAMS)
    page, _ = await _search(client, q, kind)
    return HTMLResponse(page.get(CARD_CONTAINER_ID).inner_html())


@app.get("/v1/countries")
async def countries(request: Request, q: str = "", kind: str = FilterKind.NAME.value, client: CountriesFetcher = Depends(get_client)) -> dict[str, Any]:
    _reject_unknown_query_params(request, _SEARCH_PARAMS)
    page, status = await _search(client, q, kind)
    container: CardContainer = page.get(CARD_CONTAINER_ID)
    notice: Notice | None = container.notices[0] if container.notices else None
    return {
        "ok": status in (SearchStatus.RENDERED, SearchStatus.EMPTY),
        "status": status.value,
        "notice": notice.message if notice else None,
        "countries": [card.record.as_dict() for card in container.cards if card.record is not None],
    }
