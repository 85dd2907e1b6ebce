from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from pydantic import BaseModel, ValidationError


NOT_AVAILABLE = "N/A"


class NameIn(BaseModel):
    common: str | None = None


class FlagsIn(BaseModel):
    png: str | None = None


class RawCountry(BaseModel):
    """
    Subset of a REST Countries v3.1 item. Every field is optional because the
    upstream payload is not guaranteed to carry all of them.
    """

    name: NameIn | None = None
    flags: FlagsIn | None = None
    capital: list[str] | None = None
    region: str | None = None
    population: int | None = None
    languages: dict[str, str] | None = None


@dataclass(frozen=True)
class DisplayRecord:
    flag: str
    name: str
    capital: str
    region: str
    population: int
    language: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "flag": self.flag,
            "name": self.name,
            "capital": self.capital,
            "region": self.region,
            "population": self.population,
            "language": self.language,
        }


def _field(item: dict[str, Any], model: type[BaseModel], key: str) -> Any:
    # Validate one field at a time so a single bad field does not discard the rest.
    try:
        return getattr(model.model_validate({key: item.get(key)}), key)
    except ValidationError:
        return None


def _population(item: dict[str, Any]) -> int:
    value = _field(item, RawCountry, "population")
    if value is None or value < 0:
        return 0
    return value


def _first_capital(item: dict[str, Any]) -> str:
    capitals = _field(item, RawCountry, "capital")
    if capitals:
        return capitals[0]
    return NOT_AVAILABLE


def _first_language(item: dict[str, Any]) -> str:
    languages = _field(item, RawCountry, "languages")
    if languages:
        return next(iter(languages.values()))
    return NOT_AVAILABLE


def population_of(item: Any) -> int:
    """Population of a raw item, 0 when missing or malformed."""
    if not isinstance(item, dict):
        return 0
    return _population(item)


def reported_population(item: Any) -> int | None:
    """Population as the API reported it, None when missing or not an integer."""
    if not isinstance(item, dict):
        return None
    return _field(item, RawCountry, "population")


def normalize_country(item: Any) -> DisplayRecord:
    """
    RAW -> display record. Total: never raises, every field is set.
    """
    if not isinstance(item, dict):
        item = {}

    name = _field(item, RawCountry, "name")
    flags = _field(item, RawCountry, "flags")
    region = _field(item, RawCountry, "region")

    return DisplayRecord(
        flag=(flags.png if flags and flags.png else ""),
        name=(name.common if name and name.common else ""),
        capital=_first_capital(item),
        region=region or "",
        population=_population(item),
        language=_first_language(item),
    )


def normalize_countries(items: Iterable[Any]) -> list[DisplayRecord]:
    return [normalize_country(item) for item in items]


def sort_by_population_desc(items: Iterable[Any]) -> list[Any]:
    # sorted() is stable; negating the key keeps equal populations in input order.
    return sorted(items, key=lambda item: -population_of(item))
