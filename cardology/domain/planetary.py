"""
Périodes planétaires: dates de début, période courante et enrichissement de la prévision.

Les dates de début sont stockées sans année ("MM/DD") et interprétées dans l'année civile de
"aujourd'hui". La période courante est celle dont la date de début est la plus récente parmi
celles déjà commencées.
"""

from __future__ import annotations

import calendar
from collections.abc import Mapping
from datetime import date

import structlog

from cardology.app.metrics import LOOKUP_MISSES
from cardology.domain.cards import card_image_path
from cardology.domain.entities import (
    DISPLAY_NAMES,
    PERIOD_ORDER,
    PLANETARY_PERIODS,
    STRATEGIC_PERIODS,
    Enrichment,
    Forecast,
    ResolvedPeriod,
)
from cardology.domain.forecast import date_key
from cardology.domain.tables import PlanetaryPeriodTable

log = structlog.get_logger(__name__)

FEBRUARY = 2
LEAP_DAY = 29


def parse_planetary_date(value: str, year: int) -> date:
    """Convertit "M/D" ou "MM/DD" en date de l'année donnée.

    Le 29 février d'une année non bissextile glisse au 1er mars.
    Lève ValueError si la chaîne n'est pas une date valide.
    """
    if not value or not isinstance(value, str):
        raise ValueError("empty date string")
    parts = value.strip().split("/")
    if len(parts) != 2:  # noqa: PLR2004
        raise ValueError(f"date must be MM/DD: {value!r}")
    month, day = int(parts[0]), int(parts[1])
    if month == FEBRUARY and day == LEAP_DAY and not calendar.isleap(year):
        return date(year, 3, 1)
    return date(year, month, day)


def format_start_date(value: str, year: int | None = None) -> str:
    """Formate "1/1" en "Jan 1 '25" (année courante par défaut).

    Une valeur invalide est renvoyée telle quelle.
    """
    if not value:
        return ""
    target_year = year or date.today().year
    try:
        d = parse_planetary_date(value, target_year)
    except ValueError:
        log.warning("start_date_unparseable", value=value)
        return value
    return f"{calendar.month_abbr[d.month]} {d.day} '{d.year % 100:02d}"


def current_planetary_period(
    start_dates: Mapping[str, str],
    today: date,
    wrap_previous_year: bool = True,
) -> str | None:
    """Retourne la période planétaire en cours à la date `today`.

    Candidates: périodes dont la date de début (année de `today`) est ≤ `today`; la plus
    récente l'emporte. Sans candidate, et si `wrap_previous_year`, la période au début le plus
    tardif (donc commencée l'année civile précédente) est considérée comme en cours; sinon None.
    """
    current: str | None = None
    latest: date | None = None
    wrapped: str | None = None
    wrapped_start: date | None = None
    for period in PLANETARY_PERIODS:
        raw = start_dates.get(period) or ""
        if not raw:
            continue
        try:
            start = parse_planetary_date(raw, today.year)
        except ValueError:
            log.warning("planetary_start_date_invalid", period=period, value=raw)
            continue
        if start <= today:
            if latest is None or start > latest:
                latest, current = start, period
        elif wrapped_start is None or start > wrapped_start:
            wrapped_start, wrapped = start, period
    if current is None and wrap_previous_year:
        return wrapped
    return current


def lookup_start_dates(table: PlanetaryPeriodTable, month: int, day: int) -> dict[str, str]:
    """Dates de début des 7 périodes pour l'anniversaire, {} si absent de la table."""
    key = date_key(month, day)
    row = table.get(key) if key else None
    if row is None:
        LOOKUP_MISSES.labels(lookup="planetary_periods").inc()
        log.warning("planetary_periods_not_found", birthday=key)
        return {}
    return row.as_dict()


def build_periods(
    forecast: Forecast,
    start_dates: Mapping[str, str],
    today: date,
    activations: Mapping[str, str] | None = None,
    wrap_previous_year: bool = True,
) -> Enrichment:
    """Construit une période résolue par emplacement non vide, dans l'ordre canonique."""
    current = current_planetary_period(start_dates, today, wrap_previous_year)
    activations = activations or {}
    periods: list[ResolvedPeriod] = []
    for period in PERIOD_ORDER:
        card = getattr(forecast, period)
        if not card:
            continue
        is_planetary = period in PLANETARY_PERIODS
        raw_start = (start_dates.get(period) or "") if is_planetary else None
        periods.append(
            ResolvedPeriod(
                period=period,
                display_name=DISPLAY_NAMES[period],
                card=card,
                is_planetary=is_planetary,
                is_strategic=period in STRATEGIC_PERIODS,
                start_date=raw_start,
                formatted_start_date=(
                    format_start_date(raw_start, today.year) if is_planetary else None
                ),
                is_current=period == current,
                activation=activations.get(period, ""),
                image_path=card_image_path(card),
            )
        )
    return Enrichment(periods=periods, current_period=current, start_dates=dict(start_dates))


def enrich(
    table: PlanetaryPeriodTable,
    forecast: Forecast,
    birth_month: int,
    birth_day: int,
    today: date,
    activations: Mapping[str, str] | None = None,
    wrap_previous_year: bool = True,
) -> Enrichment:
    """Fusionne la prévision avec les dates de début et la période courante."""
    start_dates = lookup_start_dates(table, birth_month, birth_day)
    return build_periods(forecast, start_dates, today, activations, wrap_previous_year)
