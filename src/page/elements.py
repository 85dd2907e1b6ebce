from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from src.render.cards import (
    CARD_CONTAINER_ID,
    FILTER_SELECT_ID,
    SEARCH_INPUT_ID,
    SHOW_ALL_ID,
    CardContainer,
)
from src.search.filters import FilterKind


class MissingElementError(LookupError):
    def __init__(self, missing: list[str]) -> None:
        super().__init__(f"Missing page elements: {', '.join(missing)}")
        self.missing = missing


Listener = Callable[[], Any]


@dataclass
class _Listenable:
    element_id: str
    listeners: dict[str, list[Listener]] = field(default_factory=dict)

    def add_listener(self, event: str, listener: Listener) -> None:
        self.listeners.setdefault(event, []).append(listener)

    def dispatch(self, event: str) -> None:
        for listener in list(self.listeners.get(event, [])):
            listener()


@dataclass
class TextInput(_Listenable):
    value: str = ""

    def enter(self, value: str) -> None:
        """Replace the value and fire `input`, like a keystroke would."""
        self.value = value
        self.dispatch("input")


@dataclass
class Select(_Listenable):
    value: str = FilterKind.NAME.value

    def choose(self, value: str) -> None:
        self.value = value
        self.dispatch("change")


@dataclass
class Button(_Listenable):
    def click(self) -> None:
        self.dispatch("click")


class Page:
    """Headless page: elements addressed by id, like the document the widget lives in."""

    def __init__(self) -> None:
        self._elements: dict[str, Any] = {}

    @classmethod
    def default(cls) -> Page:
        page = cls()
        page.add(SEARCH_INPUT_ID, TextInput(SEARCH_INPUT_ID))
        page.add(FILTER_SELECT_ID, Select(FILTER_SELECT_ID))
        page.add(SHOW_ALL_ID, Button(SHOW_ALL_ID))
        page.add(CARD_CONTAINER_ID, CardContainer(CARD_CONTAINER_ID))
        return page

    def add(self, element_id: str, element: Any) -> None:
        self._elements[element_id] = element

    def remove(self, element_id: str) -> None:
        self._elements.pop(element_id, None)

    def get(self, element_id: str) -> Any | None:
        return self._elements.get(element_id)

    def require(self, *element_ids: str) -> list[Any]:
        missing = [eid for eid in element_ids if self._elements.get(eid) is None]
        if missing:
            raise MissingElementError(missing)
        return [self._elements[eid] for eid in element_ids]
