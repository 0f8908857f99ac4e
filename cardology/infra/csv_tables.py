"""Analyse CSV et schémas typés des tables de référence.

Ce module convertit le texte CSV brut (champs entre guillemets, retours à la ligne intégrés,
guillemets doublés) en enregistrements typés, une définition de schéma par table. Les lignes
invalides sont journalisées puis ignorées; une colonne obligatoire absente de l'en-tête rend la
table inutilisable.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import structlog
from pydantic import ValidationError

from cardology.app.metrics import TABLE_ROWS_REJECTED
from cardology.domain.entities import (
    PLANETARY_PERIODS,
    BirthdateCardEntry,
    CardActivation,
    CardProfile,
    PlanetaryPeriodStartDates,
    YearlyForecastEntry,
)
from cardology.domain.tables import (
    birthdate_table,
    card_activation_table,
    card_profile_table,
    planetary_period_table,
    yearly_forecast_table,
)

log = structlog.get_logger(__name__)

BOM = "\ufeff"

# Colonnes de la table « Yearly Forecasts » → emplacement de prévision
FORECAST_COLUMNS: dict[str, str] = {
    "Mercury": "Mercury",
    "Venus": "Venus",
    "Mars": "Mars",
    "Jupiter": "Jupiter",
    "Saturn": "Saturn",
    "Uranus": "Uranus",
    "Neptune": "Neptune",
    "LongRange": "LONG RANGE",
    "Pluto": "PLUTO",
    "Result": "RESULT",
    "Support": "SUPPORT",
    "Development": "DEVELOPMENT",
}


class SchemaError(ValueError):
    """En-tête incompatible avec le schéma attendu d'une table."""


def read_csv(text: str) -> tuple[list[str] | None, list[dict[str, str]]]:
    """Analyse un CSV et renvoie `(en-tête, enregistrements)`.

    L'en-tête vaut None lorsque le texte ne contient aucune ligne non vide.
    """
    if not text:
        return None, []
    if text.startswith(BOM):
        text = text[len(BOM) :]
    reader = csv.reader(io.StringIO(text, newline=""))
    header: list[str] | None = None
    rows: list[dict[str, str]] = []
    for values in reader:
        if not any(v.strip() for v in values):
            continue
        if header is None:
            header = [h.replace(BOM, "").strip() for h in values]
            continue
        row: dict[str, str] = {}
        for idx, name in enumerate(header):
            if not name:
                continue
            row[name] = values[idx].strip() if idx < len(values) else ""
        rows.append(row)
    return header, rows


def parse_csv(text: str) -> list[dict[str, str]]:
    """Analyse un CSV avec ligne d'en-tête en liste de dictionnaires.

    - BOM initial retiré, lignes vides ignorées.
    - Noms de colonnes et valeurs débarrassés des espaces de bord.
    - Colonnes sans nom ignorées; cellules manquantes → "".
    """
    return read_csv(text)[1]


def _strip_quotes(text: str) -> str:
    """Retire des guillemets résiduels en début/fin de texte libre."""
    text = (text or "").strip()
    if text.startswith('"'):
        text = text[1:]
    if text.endswith('"'):
        text = text[:-1]
    return text.strip()


def _birthdate_row(r: dict[str, str]) -> BirthdateCardEntry:
    return BirthdateCardEntry(date=r["Date"], card=r["Card"], card_name=r.get("Card Name", ""))


def _forecast_row(r: dict[str, str]) -> YearlyForecastEntry:
    age = r["AGE"]
    if not age.isdigit():
        raise ValueError(f"AGE is not an integer: {age!r}")
    return YearlyForecastEntry(
        birth_card=r["Birth Card"],
        age=str(int(age)),
        slots={slot: r.get(col, "") for slot, col in FORECAST_COLUMNS.items()},
    )


def _planetary_row(r: dict[str, str]) -> PlanetaryPeriodStartDates:
    return PlanetaryPeriodStartDates(
        birthday=r["BIRTHDAY"], **{p: r.get(p.upper(), "") for p in PLANETARY_PERIODS}
    )


def _activation_row(r: dict[str, str]) -> CardActivation:
    return CardActivation(
        card=r["Card"], entrepreneurial_activation=r.get("Entrepreneurial Activation", "")
    )


def _profile_row(r: dict[str, str]) -> CardProfile:
    return CardProfile(
        card=r["Card"],
        description=_strip_quotes(r.get("Description", "")),
        zone_of_genius=_strip_quotes(r.get("Zone of Genius", "")),
        how_to_motivate=_strip_quotes(r.get("How to Motivate", "")),
    )


@dataclass(frozen=True)
class TableSchema:
    """Décrit une table: fichier source, colonnes clés et construction typée."""

    name: str
    filename: str
    key_columns: tuple[str, ...]
    build_row: Callable[[dict[str, str]], Any]
    build_table: Callable[[list[Any]], Any]


BIRTHDATE_CARDS = TableSchema(
    name="birthdate_cards",
    filename="Birthdate to Card.csv",
    key_columns=("Date", "Card"),
    build_row=_birthdate_row,
    build_table=birthdate_table,
)
YEARLY_FORECASTS = TableSchema(
    name="yearly_forecasts",
    filename="Yearly Forecasts.csv",
    key_columns=("Birth Card", "AGE"),
    build_row=_forecast_row,
    build_table=yearly_forecast_table,
)
PLANETARY_PERIODS_SCHEMA = TableSchema(
    name="planetary_periods",
    filename="Planetary Periods.csv",
    key_columns=("BIRTHDAY",),
    build_row=_planetary_row,
    build_table=planetary_period_table,
)
CARD_ACTIVATIONS = TableSchema(
    name="card_activations",
    filename="Card to Activities MDBC.csv",
    key_columns=("Card",),
    build_row=_activation_row,
    build_table=card_activation_table,
)
CARD_PROFILES = TableSchema(
    name="card_profiles",
    filename="MDBC Card Profiles.csv",
    key_columns=("Card",),
    build_row=_profile_row,
    build_table=card_profile_table,
)

SCHEMAS: tuple[TableSchema, ...] = (
    BIRTHDATE_CARDS,
    YEARLY_FORECASTS,
    PLANETARY_PERIODS_SCHEMA,
    CARD_ACTIVATIONS,
    CARD_PROFILES,
)


def build_table(schema: TableSchema, text: str):
    """Analyse le texte CSV et construit la table typée du schéma.

    Lève SchemaError si le texte est vide ou si une colonne clé manque dans l'en-tête,
    même sans ligne de données.
    """
    header, records = read_csv(text)
    if header is None:
        raise SchemaError(f"{schema.filename}: empty table, no header row")
    missing = [c for c in schema.key_columns if c not in header]
    if missing:
        raise SchemaError(f"{schema.filename}: missing columns {missing}")
    rows: list[Any] = []
    for row_no, record in enumerate(records, start=2):
        if not all(record.get(c) for c in schema.key_columns):
            TABLE_ROWS_REJECTED.labels(table=schema.name).inc()
            log.warning("table_row_missing_key", table=schema.name, row=row_no)
            continue
        try:
            rows.append(schema.build_row(record))
        except (ValidationError, ValueError) as exc:
            TABLE_ROWS_REJECTED.labels(table=schema.name).inc()
            log.warning(
                "table_row_rejected", table=schema.name, row=row_no, error=str(exc)
            )
    return schema.build_table(rows)
