from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Any, Callable

from src.collector.api_client import InvalidParameterError
from src.transforms.countries import reported_population


class FilterKind(str, enum.Enum):
    NAME = "name"
    REGION = "region"
    CAPITAL = "capital"
    LANGUAGE = "language"
    POPULATION_GTE = "population_gte"
    POPULATION_LTE = "population_lte"

    @classmethod
    def parse(cls, value: Any) -> FilterKind:
        """
        Accept the symbolic value or the numeric selector code ("0".."5").
        Anything else is an invalid parameter.
        """
        if isinstance(value, cls):
            return value
        raw = str(value if value is not None else "").strip()
        if raw in _SELECTOR_CODES:
            return _SELECTOR_CODES[raw]
        try:
            return cls(raw)
        except ValueError:
            raise InvalidParameterError(f"Invalid parameter: {value!r}") from None


_SELECTOR_CODES: dict[str, FilterKind] = {
    "0": FilterKind.NAME,
    "1": FilterKind.REGION,
    "2": FilterKind.CAPITAL,
    "3": FilterKind.LANGUAGE,
    "4": FilterKind.POPULATION_GTE,
    "5": FilterKind.POPULATION_LTE,
}

_INT_PREFIX_RE = re.compile(r"^\s*([+-]?)(0[xX])?([0-9a-fA-F]*)")


def parse_threshold(text: str) -> int | None:
    """
    Integer-prefix parse: "20" -> 20, " 20abc" -> 20, "0x10" -> 16, "abc" -> None.
    Digits are ASCII only.
    None stands for "not a number" and fails every comparison.
    """
    m = _INT_PREFIX_RE.match(text or "")
    sign, hex_prefix, digits = m.groups()
    if hex_prefix:
        value = int(digits, 16) if digits else None
    else:
        dec = re.match(r"[0-9]+", digits)
        value = int(dec.group(0)) if dec else None
    if value is None:
        return None
    return -value if sign == "-" else value


@dataclass(frozen=True)
class QueryPlan:
    # endpoint is None for the full collection, else one of the API filter sub-paths.
    endpoint: str | None
    term: str | None = None
    refine: Callable[[dict[str, Any]], bool] | None = None

    def apply(self, items: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if self.refine is None:
            return items
        return [item for item in items if self.refine(item)]


def _path_strategy(endpoint: str) -> Callable[[str], QueryPlan]:
    def build(term: str) -> QueryPlan:
        return QueryPlan(endpoint=endpoint, term=term)

    return build


def _population_strategy(compare: Callable[[int, int], bool]) -> Callable[[str], QueryPlan]:
    def build(term: str) -> QueryPlan:
        threshold = parse_threshold(term)

        def refine(item: dict[str, Any]) -> bool:
            population = reported_population(item)
            if threshold is None or population is None:
                return False
            return compare(population, threshold)

        return QueryPlan(endpoint=None, refine=refine)

    return build


STRATEGIES: dict[FilterKind, Callable[[str], QueryPlan]] = {
    FilterKind.NAME: _path_strategy("name"),
    FilterKind.REGION: _path_strategy("region"),
    FilterKind.CAPITAL: _path_strategy("capital"),
    FilterKind.LANGUAGE: _path_strategy("language"),
    FilterKind.POPULATION_GTE: _population_strategy(lambda pop, thr: pop >= thr),
    FilterKind.POPULATION_LTE: _population_strategy(lambda pop, thr: pop <= thr),
}


def build_query(kind: Any, term: str) -> QueryPlan:
    return STRATEGIES[FilterKind.parse(kind)](term)
