from __future__ import annotations

import copy
from dataclasses import dataclass, field
from html import escape
from typing import Iterable, Protocol, Union

from src.transforms.countries import DisplayRecord


# Element ids shared with the page markup.
CARD_TEMPLATE_ID = "country-template"
CARD_CONTAINER_ID = "card-container"
SEARCH_INPUT_ID = "consultaSearch"
FILTER_SELECT_ID = "select-parametro"
SHOW_ALL_ID = "verTodo"

# Named paragraph slots of a card, in display order.
CARD_FIELD_SLOTS = ("capital", "region", "poblacion", "idioma")

NO_MATCHES_MESSAGE = "No countries matched that criteria"
NO_RESULTS_MESSAGE = "No results"


@dataclass
class Element:
    tag: str
    name: str | None = None
    text: str = ""
    attrs: dict[str, str] = field(default_factory=dict)

    def to_html(self) -> str:
        attrs = dict(self.attrs)
        if self.name is not None:
            attrs = {"name": self.name, **attrs}
        attr_text = "".join(f' {k}="{escape(v, quote=True)}"' for k, v in attrs.items())
        if self.tag == "img":
            return f"<img{attr_text}>"
        return f"<{self.tag}{attr_text}>{escape(self.text)}</{self.tag}>"


@dataclass
class Card:
    elements: list[Element]
    record: DisplayRecord | None = None

    def select(self, tag: str, name: str | None = None) -> Element:
        for el in self.elements:
            if el.tag == tag and el.name == name:
                return el
        raise LookupError(f"Card has no <{tag}> slot named {name!r}")

    def to_html(self) -> str:
        inner = "".join(el.to_html() for el in self.elements)
        return f'<div class="card">{inner}</div>'

    def to_text(self) -> str:
        heading = self.select("h2").text
        fields = ", ".join(f"{slot}={self.select('p', slot).text}" for slot in CARD_FIELD_SLOTS)
        return f"{heading} ({fields})"


@dataclass(frozen=True)
class Notice:
    message: str

    def to_html(self) -> str:
        return f'<div class="error">{escape(self.message)}</div>'

    def to_text(self) -> str:
        return self.message


RenderUnit = Union[Card, Notice]


class RenderTarget(Protocol):
    def clear(self) -> None: ...

    def append(self, unit: RenderUnit) -> None: ...


class CardContainer:
    """
    In-memory stand-in for the card container element. Units are kept in
    append order and can be serialized to HTML or plain text.
    """

    def __init__(self, element_id: str = CARD_CONTAINER_ID) -> None:
        self.element_id = element_id
        self.units: list[RenderUnit] = []

    def clear(self) -> None:
        self.units.clear()

    def append(self, unit: RenderUnit) -> None:
        self.units.append(unit)

    @property
    def cards(self) -> list[Card]:
        return [u for u in self.units if isinstance(u, Card)]

    @property
    def notices(self) -> list[Notice]:
        return [u for u in self.units if isinstance(u, Notice)]

    def inner_html(self) -> str:
        return "".join(u.to_html() for u in self.units)

    def to_html(self) -> str:
        return f'<div id="{escape(self.element_id, quote=True)}">{self.inner_html()}</div>'

    def to_text(self) -> str:
        return "\n".join(u.to_text() for u in self.units)


def _default_slots() -> list[Element]:
    return [
        Element(tag="img", attrs={"src": "", "alt": ""}),
        Element(tag="h2"),
        *[Element(tag="p", name=slot) for slot in CARD_FIELD_SLOTS],
    ]


class CardTemplate:
    """Source markup for one card. Rendering works on clones, never on these elements."""

    def __init__(self, elements: Iterable[Element] | None = None) -> None:
        self._elements = list(elements) if elements is not None else _default_slots()

    @property
    def elements(self) -> list[Element]:
        return self._elements

    def clone(self) -> Card:
        return Card(elements=copy.deepcopy(self._elements))

    def to_html(self) -> str:
        return f'<template id="{CARD_TEMPLATE_ID}">{Card(elements=self._elements).to_html()}</template>'


class CardRenderer:
    def __init__(self, template: CardTemplate | None = None) -> None:
        self.template = template or CardTemplate()

    def build(self, record: DisplayRecord) -> Card:
        card = self.template.clone()
        img = card.select("img")
        img.attrs["src"] = record.flag
        img.attrs["alt"] = record.name
        card.select("h2").text = record.name
        card.select("p", "capital").text = record.capital
        card.select("p", "region").text = record.region
        card.select("p", "poblacion").text = str(record.population)
        card.select("p", "idioma").text = record.language
        card.record = record
        return card

    def render(self, record: DisplayRecord, target: RenderTarget) -> None:
        target.append(self.build(record))

    def render_all(self, records: Iterable[DisplayRecord], target: RenderTarget) -> int:
        n = 0
        for record in records:
            self.render(record, target)
            n += 1
        return n

    def render_notice(self, message: str, target: RenderTarget) -> None:
        target.append(Notice(message=message))

    def clear(self, target: RenderTarget) -> None:
        target.clear()
