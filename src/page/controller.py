from __future__ import annotations

import asyncio
from typing import Any, Coroutine

from src.page.elements import MissingElementError, Page
from src.render.cards import FILTER_SELECT_ID, SEARCH_INPUT_ID, SHOW_ALL_ID
from src.search.controller import SearchController, SearchOutcome
from src.utils.debounce import Debouncer, Scheduler, schedule_debounced
from src.utils.logging import get_logger


logger = get_logger(component="page_controller")

DEFAULT_DEBOUNCE_SECONDS = 0.5


class PageController:
    """
    Wires the page elements to the search controller:
    - initial load of every country
    - "show all" button
    - debounced text input
    - filter-kind change (only when there is text to search for)
    """

    def __init__(
        self,
        *,
        page: Page,
        search: SearchController,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.page = page
        self.search = search
        self.debouncer: Debouncer = schedule_debounced(self._run_search, debounce_seconds, scheduler=scheduler)
        self._tasks: set[asyncio.Task[Any]] = set()
        self.outcomes: list[SearchOutcome] = []

    async def start(self) -> SearchOutcome:
        outcome = await self.search.show_all()
        self.outcomes.append(outcome)

        try:
            text_input, select, show_all = self.page.require(SEARCH_INPUT_ID, FILTER_SELECT_ID, SHOW_ALL_ID)
        except MissingElementError as e:
            logger.error("missing_elements", missing=e.missing)
            return outcome

        show_all.add_listener("click", self.on_show_all)
        text_input.add_listener("input", self.on_input)
        select.add_listener("change", self.on_filter_change)
        logger.info("page_ready", status=outcome.status.value, count=outcome.count)
        return outcome

    def on_show_all(self) -> None:
        self._spawn(self.search.show_all())

    def on_input(self) -> None:
        self.debouncer.trigger()

    def on_filter_change(self) -> None:
        text_input = self.page.get(SEARCH_INPUT_ID)
        if text_input is not None and text_input.value != "":
            self._run_search()

    async def drain(self) -> None:
        """Wait for every spawned run, including ones spawned while waiting."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def _run_search(self) -> None:
        self._spawn(self.search.run())

    def _spawn(self, coro: Coroutine[Any, Any, SearchOutcome]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("page_task_failed", error=str(exc), error_type=type(exc).__name__)
            return
        self.outcomes.append(task.result())
