"""
Résolution de la carte de naissance et de la prévision annuelle.

Règles:
- Carte de naissance: clé "{Mois} {jour}" (jour sans zéro initial), correspondance exacte.
- Prévision: carte normalisée + âge en base 10, 12 emplacements nettoyés indépendamment.
- Une absence de ligne n'est jamais une erreur: sentinelle ou prévision vide.
"""

from __future__ import annotations

import calendar
from typing import Any

import structlog

from cardology.app.metrics import LOOKUP_MISSES
from cardology.domain.cards import normalize
from cardology.domain.entities import (
    DISPLAY_NAMES,
    PERIOD_ORDER,
    PLANETARY_PERIODS,
    STRATEGIC_PERIODS,
    UNKNOWN_CARD,
    UNKNOWN_CARD_NAME,
    BirthCardResult,
    Forecast,
)
from cardology.domain.tables import BirthdateCardTable, YearlyForecastTable

log = structlog.get_logger(__name__)


def date_key(month: int, day: int) -> str | None:
    """Clé de table pour un anniversaire ("January 1"), None si le mois est invalide."""
    if not 1 <= month <= 12:  # noqa: PLR2004
        return None
    return f"{calendar.month_name[month]} {int(day)}"


def resolve_birth_card(table: BirthdateCardTable, month: int, day: int) -> BirthCardResult:
    """Retourne la carte de naissance pour (mois, jour).

    L'année n'intervient pas. Sans correspondance, renvoie la sentinelle
    `{card: "Unknown", name: "Unknown Card"}` sans lever d'exception.
    """
    key = date_key(month, day)
    row = table.get(key) if key else None
    if row is None:
        LOOKUP_MISSES.labels(lookup="birth_card").inc()
        log.warning("birth_card_not_found", date_key=key)
        return BirthCardResult(card=UNKNOWN_CARD, name=UNKNOWN_CARD_NAME, date_key=key)
    return BirthCardResult(card=row.card, name=row.card_name or row.card, date_key=key)


def clean_card_value(value: Any) -> str:
    """Nettoie une cellule de carte: blanc ou "none" (insensible à la casse) → ""."""
    if value is None:
        return ""
    text = str(value).strip()
    if not text or text.lower() == "none":
        return ""
    return text


def empty_forecast() -> Forecast:
    return Forecast()


def resolve_forecast(table: YearlyForecastTable, birth_card: str, age: int) -> Forecast:
    """Retourne la prévision (12 emplacements) pour une carte de naissance et un âge.

    Sans ligne correspondante, tous les emplacements sont vides.
    """
    bc = normalize(birth_card)
    a = str(int(age))
    row = table.get((bc, a))
    if row is None:
        LOOKUP_MISSES.labels(lookup="forecast").inc()
        log.warning("forecast_not_found", birth_card=bc, age=a)
        return empty_forecast()
    return Forecast(**{p: clean_card_value(row.slots.get(p)) for p in PERIOD_ORDER})


def format_forecast_for_display(forecast: Forecast) -> list[dict[str, Any]]:
    """Liste ordonnée des emplacements non vides avec nom d'affichage et type."""
    return [
        {
            "period": period,
            "card": card,
            "display_name": DISPLAY_NAMES[period],
            "is_planetary": period in PLANETARY_PERIODS,
            "is_strategic": period in STRATEGIC_PERIODS,
        }
        for period, card in forecast.as_dict().items()
        if card
    ]
