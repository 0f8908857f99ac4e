"""Vues en lecture seule sur les tables de référence chargées.

Chaque table est un index immuable construit une seule fois au chargement; les résolveurs du
domaine n'y accèdent que par `get`.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Hashable, Iterable, Iterator
from typing import Generic, TypeVar

import structlog

from cardology.domain.cards import normalize
from cardology.domain.entities import (
    BirthdateCardEntry,
    CardActivation,
    CardProfile,
    PlanetaryPeriodStartDates,
    YearlyForecastEntry,
)

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)

log = structlog.get_logger(__name__)

_WS = re.compile(r"\s+")


def strip_whitespace(text: str) -> str:
    return _WS.sub("", text or "")


class KeyedTable(Generic[K, T]):
    """Index clé → enregistrement; la première occurrence d'une clé l'emporte."""

    def __init__(self, name: str, rows: Iterable[T], key: Callable[[T], K]):
        self.name = name
        self._rows: dict[K, T] = {}
        for row in rows:
            k = key(row)
            if k in self._rows:
                log.warning("table_duplicate_key", table=name, key=str(k))
                continue
            self._rows[k] = row

    def get(self, key: K) -> T | None:
        return self._rows.get(key)

    def keys(self) -> list[K]:
        return list(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[T]:
        return iter(self._rows.values())


class CardKeyedTable(KeyedTable[str, T]):
    """Table indexée par carte, tolérante aux espaces incohérents des données.

    Recherche: jeton normalisé exact, puis correspondance sans espaces.
    """

    def __init__(self, name: str, rows: Iterable[T], key: Callable[[T], str]):
        super().__init__(name, rows, key)
        self._compact: dict[str, T] = {}
        for k, row in self._rows.items():
            self._compact.setdefault(strip_whitespace(k), row)

    def get(self, key: str) -> T | None:
        if not key or not key.strip():
            return None
        token = normalize(key)
        row = self._rows.get(token)
        if row is None:
            row = self._compact.get(strip_whitespace(token))
        return row


BirthdateCardTable = KeyedTable[str, BirthdateCardEntry]
YearlyForecastTable = KeyedTable[tuple[str, str], YearlyForecastEntry]
PlanetaryPeriodTable = KeyedTable[str, PlanetaryPeriodStartDates]
CardActivationTable = CardKeyedTable[CardActivation]
CardProfileTable = CardKeyedTable[CardProfile]


def birthdate_table(rows: Iterable[BirthdateCardEntry]) -> BirthdateCardTable:
    return KeyedTable("birthdate_cards", rows, key=lambda r: r.date)


def yearly_forecast_table(rows: Iterable[YearlyForecastEntry]) -> YearlyForecastTable:
    return KeyedTable("yearly_forecasts", rows, key=lambda r: (normalize(r.birth_card), r.age))


def planetary_period_table(rows: Iterable[PlanetaryPeriodStartDates]) -> PlanetaryPeriodTable:
    return KeyedTable("planetary_periods", rows, key=lambda r: r.birthday)


def card_activation_table(rows: Iterable[CardActivation]) -> CardActivationTable:
    return CardKeyedTable("card_activations", rows, key=lambda r: r.card)


def card_profile_table(rows: Iterable[CardProfile]) -> CardProfileTable:
    return CardKeyedTable("card_profiles", rows, key=lambda r: r.card)
