"""Tests du service de lecture: scénario de bout en bout sur les tables d'essai.

Naissance le 1er janvier 1990, « aujourd'hui » le 15 avril 2025: âge 35, carte K♠, période de
Mars en cours (commencée le 15 avril).
"""

from datetime import date

import pytest

from cardology.domain.entities import UNKNOWN_CARD
from cardology.domain.services import InvalidBirthDate, ReadingService, compute_age
from cardology.infra.table_repository import FileTableSource, ReferenceTables, TableLoadError

EXPECTED_AGE = 35
OVERRIDE_AGE = 36
PLANETARY_COUNT = 7
STRATEGIC_COUNT = 5


def test_compute_age_around_birthday():
    born = date(1990, 4, 16)
    assert compute_age(born, date(2025, 4, 15)) == 34  # noqa: PLR2004
    assert compute_age(born, date(2025, 4, 16)) == EXPECTED_AGE
    assert compute_age(date(2030, 1, 1), date(2025, 1, 1)) == 0


@pytest.mark.asyncio
async def test_forecast_end_to_end_with_activation(service):
    forecast = await service.forecast("A♠", EXPECTED_AGE)
    assert forecast.Mercury == "K♥"
    activations = await service.activations(forecast)
    assert activations["Mercury"] == "Lead with generosity."


@pytest.mark.asyncio
async def test_full_reading(service):
    reading = await service.reading("Ada", 1990, 1, 1)
    assert reading.age == EXPECTED_AGE
    assert reading.date_key == "January 1"
    assert reading.birth_date == "1990-01-01"
    assert reading.birth_card.card == "K♠"
    assert reading.birth_card.activation == "Own the room."
    assert reading.birth_card.profile.zone_of_genius == "Strategy and leadership"
    assert reading.birth_card.image_path == "/cards/KS.png"
    assert reading.forecast.Mercury == "K♥"
    assert len(reading.planetary_periods) == PLANETARY_COUNT
    assert len(reading.strategic_outlook) == STRATEGIC_COUNT
    assert reading.current_period == "Mars"
    mars = next(p for p in reading.planetary_periods if p.period == "Mars")
    assert mars.is_current is True
    assert mars.formatted_start_date == "Apr 15 '25"
    assert reading.activations["Mercury"] == "Lead with generosity."


@pytest.mark.asyncio
async def test_reading_with_age_override(service):
    reading = await service.reading("Ada", 1990, 1, 1, age=OVERRIDE_AGE)
    assert reading.age == OVERRIDE_AGE
    assert [p.period for p in reading.all_periods] == ["Mercury", "LongRange"]


@pytest.mark.asyncio
async def test_reading_unknown_birthday_is_not_an_error(service):
    reading = await service.reading("Bo", 1990, 7, 4)
    assert reading.birth_card.card == UNKNOWN_CARD
    assert reading.forecast.is_empty()
    assert reading.all_periods == []
    assert reading.current_period is None


@pytest.mark.asyncio
async def test_reading_invalid_date_raises(service):
    with pytest.raises(InvalidBirthDate):
        await service.reading("Ada", 1990, 2, 30)
    assert not any(service.tables.status().values())


@pytest.mark.asyncio
async def test_tables_loaded_once_across_readings(service):
    await service.reading("Ada", 1990, 1, 1)
    await service.reading("Ada", 1990, 1, 1)
    assert all(service.tables.table(name).load_count == 1 for name in service.tables.status())


@pytest.mark.asyncio
async def test_missing_table_raises_table_load_error(seed_dir):
    (seed_dir / "Yearly Forecasts.csv").unlink()
    tables = ReferenceTables(FileTableSource(seed_dir))
    service = ReadingService(tables, clock=lambda: date(2025, 4, 15))
    with pytest.raises(TableLoadError):
        await service.reading("Ada", 1990, 1, 1)
