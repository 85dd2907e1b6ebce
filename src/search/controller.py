from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Protocol

from src.collector.api_client import APIClientError
from src.page.elements import MissingElementError, Page
from src.render.cards import (
    CARD_CONTAINER_ID,
    FILTER_SELECT_ID,
    NO_MATCHES_MESSAGE,
    NO_RESULTS_MESSAGE,
    SEARCH_INPUT_ID,
    CardRenderer,
    RenderTarget,
)
from src.search.filters import build_query
from src.transforms.countries import DisplayRecord, normalize_countries, sort_by_population_desc
from src.utils.logging import get_logger


logger = get_logger(component="search_controller")


class CountriesFetcher(Protocol):
    async def fetch_all(self) -> list[dict[str, Any]]: ...

    async def fetch_by_filter(self, kind: str, term: str) -> list[dict[str, Any]]: ...


class RenderGeneration:
    """
    Monotonic token source shared by everything that renders into one container.
    Only the holder of the latest token may commit; older in-flight runs are dropped.
    """

    def __init__(self) -> None:
        self._latest = 0

    @property
    def latest(self) -> int:
        return self._latest

    def issue(self) -> int:
        self._latest += 1
        return self._latest

    def is_current(self, token: int) -> bool:
        return token == self._latest


class SearchStatus(str, enum.Enum):
    RENDERED = "rendered"
    EMPTY = "empty"
    ERROR = "error"
    ABORTED = "aborted"
    STALE = "stale"


@dataclass(frozen=True)
class SearchOutcome:
    status: SearchStatus
    count: int = 0


class SearchController:
    def __init__(
        self,
        *,
        client: CountriesFetcher,
        page: Page,
        renderer: CardRenderer | None = None,
        generation: RenderGeneration | None = None,
    ) -> None:
        self.client = client
        self.page = page
        self.renderer = renderer or CardRenderer()
        self.generation = generation or RenderGeneration()

    async def run(self) -> SearchOutcome:
        """
        One search pass driven by the current input text and selected filter kind.

        - empty text: full listing, API order
        - population kinds: full listing refined by threshold
        - categorical kinds: API sub-path lookup
        Non-empty results are sorted by population, descending (stable).
        """
        try:
            text_input, select, container = self.page.require(SEARCH_INPUT_ID, FILTER_SELECT_ID, CARD_CONTAINER_ID)
        except MissingElementError as e:
            logger.error("missing_elements", missing=e.missing)
            return SearchOutcome(SearchStatus.ABORTED)

        token = self.generation.issue()
        term = text_input.value
        kind = select.value
        self.renderer.clear(container)

        try:
            if term == "":
                items = await self.client.fetch_all()
                return self._commit_records(token, container, normalize_countries(items))

            plan = build_query(kind, term)
            if plan.endpoint is None:
                items = await self.client.fetch_all()
            else:
                items = await self.client.fetch_by_filter(plan.endpoint, plan.term or "")
            items = plan.apply(items or [])

            if not items:
                if not self._is_current(token):
                    return SearchOutcome(SearchStatus.STALE)
                self.renderer.render_notice(NO_MATCHES_MESSAGE, container)
                logger.info("search_no_matches", kind=str(kind), term=term)
                return SearchOutcome(SearchStatus.EMPTY)

            records = normalize_countries(sort_by_population_desc(items))
            return self._commit_records(token, container, records)
        except APIClientError as e:
            if not self._is_current(token):
                return SearchOutcome(SearchStatus.STALE)
            logger.warning("search_failed", kind=str(kind), term=term, error=str(e), error_type=type(e).__name__)
            self.renderer.clear(container)
            self.renderer.render_notice(NO_RESULTS_MESSAGE, container)
            return SearchOutcome(SearchStatus.ERROR)

    async def show_all(self) -> SearchOutcome:
        """
        Clear and list every country. Failures are logged and leave the container empty.
        """
        try:
            (container,) = self.page.require(CARD_CONTAINER_ID)
        except MissingElementError as e:
            logger.error("missing_elements", missing=e.missing)
            return SearchOutcome(SearchStatus.ABORTED)

        token = self.generation.issue()
        self.renderer.clear(container)
        try:
            items = await self.client.fetch_all()
        except APIClientError as e:
            logger.error("load_all_failed", error=str(e), error_type=type(e).__name__)
            return SearchOutcome(SearchStatus.ERROR)
        return self._commit_records(token, container, normalize_countries(items))

    def _is_current(self, token: int) -> bool:
        if self.generation.is_current(token):
            return True
        logger.info("search_result_stale", token=token, latest=self.generation.latest)
        return False

    def _commit_records(self, token: int, container: RenderTarget, records: list[DisplayRecord]) -> SearchOutcome:
        if not self._is_current(token):
            return SearchOutcome(SearchStatus.STALE)
        n = self.renderer.render_all(records, container)
        return SearchOutcome(SearchStatus.RENDERED, count=n)
