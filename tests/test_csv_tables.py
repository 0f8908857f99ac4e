"""Tests pour l'analyse CSV et la construction typée des tables de référence.

Ce module couvre les champs entre guillemets (retours à la ligne, guillemets doublés), le BOM, les
en-têtes avec espaces parasites et le rejet des lignes invalides.
"""

import pytest

from cardology.infra.csv_tables import (
    BIRTHDATE_CARDS,
    CARD_PROFILES,
    PLANETARY_PERIODS_SCHEMA,
    YEARLY_FORECASTS,
    SchemaError,
    build_table,
    parse_csv,
)
from tests.seed_tables import PROFILES_CSV, YEARLY_FORECASTS_CSV

SEED_FORECAST_ROWS = 4


def test_parse_csv_quoted_fields_and_escapes():
    text = 'A,B\n"x, y","line1\nline2"\n"say ""hi""",plain\n'
    rows = parse_csv(text)
    assert rows == [
        {"A": "x, y", "B": "line1\nline2"},
        {"A": 'say "hi"', "B": "plain"},
    ]


def test_parse_csv_strips_bom_blank_lines_and_header_spaces():
    text = "\ufeff Card , Text\n\nK♠ ,  hello \n,\n"
    assert parse_csv(text) == [{"Card": "K♠", "Text": "hello"}]


def test_parse_csv_short_rows_and_unnamed_columns():
    rows = parse_csv("A,,B\n1,ignored\n")
    assert rows == [{"A": "1", "B": ""}]


def test_parse_csv_empty_text():
    assert parse_csv("") == []


def test_profiles_header_with_leading_space():
    """L'en-tête « How to Motivate » précédé d'un espace est reconnu."""
    table = build_table(CARD_PROFILES, PROFILES_CSV)
    king = table.get("K♠")
    assert king is not None
    assert king.how_to_motivate == "Give them autonomy."
    assert king.description == 'The master card.\nCarries "authority" naturally.'


def test_forecast_table_keys_are_normalized():
    table = build_table(YEARLY_FORECASTS, YEARLY_FORECASTS_CSV)
    assert len(table) == SEED_FORECAST_ROWS
    assert table.get(("K♠", "36")) is not None
    assert table.get(("A♠", "35")).slots["Mercury"] == "K♥"


def test_forecast_rows_with_invalid_age_are_rejected():
    text = YEARLY_FORECASTS_CSV + "Q♣,abc,K♥,,,,,,,,,,,\n,40,K♥,,,,,,,,,,,\n"
    table = build_table(YEARLY_FORECASTS, text)
    assert len(table) == SEED_FORECAST_ROWS


def test_missing_key_column_raises_schema_error():
    with pytest.raises(SchemaError):
        build_table(BIRTHDATE_CARDS, "Day,Card\nJanuary 1,K♠\n")


def test_header_only_table_with_wrong_columns_raises_schema_error():
    with pytest.raises(SchemaError):
        build_table(YEARLY_FORECASTS, "Card,Age,Mercury\n")


@pytest.mark.parametrize("text", ["", "\n\n", "\ufeff"])
def test_empty_table_raises_schema_error(text):
    with pytest.raises(SchemaError):
        build_table(YEARLY_FORECASTS, text)


def test_header_only_table_with_key_columns_is_empty():
    assert len(build_table(YEARLY_FORECASTS, "Birth Card,AGE,Mercury\n")) == 0


def test_duplicate_keys_keep_first_row():
    text = "Date,Card,Card Name\nJanuary 1,K♠,King of Spades\nJanuary 1,A♥,Ace of Hearts\n"
    table = build_table(BIRTHDATE_CARDS, text)
    assert len(table) == 1
    assert table.get("January 1").card == "K♠"


def test_planetary_table_reads_uppercase_columns():
    text = "BIRTHDAY,MERCURY,VENUS\nJanuary 1,1/1,2/22\n"
    row = build_table(PLANETARY_PERIODS_SCHEMA, text).get("January 1")
    assert row.as_dict()["Venus"] == "2/22"
    assert row.as_dict()["Neptune"] == ""
