from __future__ import annotations

import copy

from src.render.cards import CARD_FIELD_SLOTS, CardContainer, CardRenderer, CardTemplate, Notice
from src.transforms.countries import DisplayRecord


def _record(name: str, population: int = 1) -> DisplayRecord:
    return DisplayRecord(
        flag=f"https://flagcdn.com/{name.lower()}.png",
        name=name,
        capital="Capital",
        region="Region",
        population=population,
        language="Language",
    )


def test_render_binds_every_slot() -> None:
    container = CardContainer()
    CardRenderer().render(_record("Spain", 47351567), container)

    (card,) = container.cards
    assert card.select("img").attrs["src"] == "https://flagcdn.com/spain.png"
    assert card.select("h2").text == "Spain"
    assert card.select("p", "capital").text == "Capital"
    assert card.select("p", "region").text == "Region"
    assert card.select("p", "poblacion").text == "47351567"
    assert card.select("p", "idioma").text == "Language"


def test_render_appends_in_call_order_without_touching_template() -> None:
    template = CardTemplate()
    pristine = copy.deepcopy(template.elements)
    renderer = CardRenderer(template)
    container = CardContainer()

    names = ["Peru", "Chile", "Peru", "Japan"]
    for name in names:
        renderer.render(_record(name), container)

    assert [c.select("h2").text for c in container.cards] == names
    assert template.elements == pristine


def test_cards_do_not_share_slot_elements() -> None:
    container = CardContainer()
    renderer = CardRenderer()
    renderer.render(_record("Peru"), container)
    renderer.render(_record("Chile"), container)

    first, second = container.cards
    first.select("h2").text = "changed"
    assert second.select("h2").text == "Chile"


def test_clear_removes_previous_units() -> None:
    container = CardContainer()
    renderer = CardRenderer()
    renderer.render(_record("Peru"), container)
    renderer.render_notice("No results", container)
    renderer.clear(container)
    assert container.units == []

    renderer.render(_record("Chile"), container)
    assert len(container.units) == 1


def test_html_output_escapes_text() -> None:
    container = CardContainer()
    CardRenderer().render(_record("<b>Côte</b>"), container)
    html = container.to_html()
    assert html.startswith('<div id="card-container">')
    assert "&lt;b&gt;Côte&lt;/b&gt;" in html
    for slot in CARD_FIELD_SLOTS:
        assert f'name="{slot}"' in html


def test_notice_renders_error_div() -> None:
    assert Notice("No results").to_html() == '<div class="error">No results</div>'
