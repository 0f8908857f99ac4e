"""Tests des endpoints HTTP `/cards` et `/chat`.

Les services des routes sont remplacés par un service branché sur les tables d'essai; une table
manquante doit produire une enveloppe 503 « DATA_UNAVAILABLE ».
"""

from __future__ import annotations

from datetime import date

import pytest
from fastapi.testclient import TestClient

from cardology.app.main import app
from cardology.core.http_constants import (
    HTTP_NOT_FOUND,
    HTTP_OK,
    HTTP_SERVICE_UNAVAILABLE,
    HTTP_UNPROCESSABLE_ENTITY,
)
from cardology.domain.services import ReadingService
from cardology.infra.table_repository import FileTableSource, ReferenceTables

EXPECTED_AGE = 35
SLOT_COUNT = 12
OVERSIZED_FIELD = 200_000


@pytest.fixture
def client(monkeypatch, service):
    monkeypatch.setattr("cardology.api.routes_cards.service", service)
    monkeypatch.setattr("cardology.api.routes_chat.service", service)
    return TestClient(app)


def test_normalize_endpoint(client):
    r = client.get("/cards/normalize", params={"card": "King of Spades"})
    assert r.status_code == HTTP_OK
    body = r.json()
    assert body["token"] == "K♠"
    assert body["valid"] is True
    assert body["name"] == "King of Spades"
    assert body["image_path"] == "/cards/KS.png"


def test_normalize_unparseable_is_not_an_error(client):
    r = client.get("/cards/normalize", params={"card": " Joker "})
    assert r.status_code == HTTP_OK
    assert r.json()["token"] == "Joker"
    assert r.json()["valid"] is False


def test_birth_card_endpoint(client):
    r = client.get("/cards/birth-card", params={"month": 1, "day": 1})
    assert r.status_code == HTTP_OK
    assert r.json() == {"card": "K♠", "name": "King of Spades", "date_key": "January 1"}


def test_birth_card_miss_returns_sentinel(client):
    r = client.get("/cards/birth-card", params={"month": 13, "day": 1})
    assert r.status_code == HTTP_OK
    assert r.json()["card"] == "Unknown"


def test_forecast_endpoint(client):
    r = client.get("/cards/forecast", params={"birth_card": "A ♠", "age": EXPECTED_AGE})
    assert r.status_code == HTTP_OK
    body = r.json()
    assert len(body) == SLOT_COUNT
    assert body["Mercury"] == "K♥"
    assert body["Mars"] == ""


def test_activation_and_profile_endpoints(client):
    r = client.get("/cards/activation", params={"card": "King of Hearts"})
    assert r.json() == {"card": "K♥", "activation": "Lead with generosity."}
    r = client.get("/cards/profile", params={"card": "K♥"})
    assert r.status_code == HTTP_OK
    assert r.json()["how_to_motivate"] == "Praise in public."


def test_profile_missing_is_404_envelope(client):
    r = client.get("/cards/profile", params={"card": "Q♣"}, headers={"X-Request-ID": "req-1"})
    assert r.status_code == HTTP_NOT_FOUND
    assert r.json()["code"] == "NOT_FOUND"
    assert r.json()["trace_id"] == "req-1"


def test_reading_endpoint(client):
    r = client.post("/cards/reading", json={"name": "Ada", "year": 1990, "month": 1, "day": 1})
    assert r.status_code == HTTP_OK
    body = r.json()
    assert body["age"] == EXPECTED_AGE
    assert body["birth_card"]["card"] == "K♠"
    assert body["current_period"] == "Mars"
    assert r.headers["X-Request-ID"]


def test_reading_invalid_date_is_422(client):
    r = client.post("/cards/reading", json={"name": "Ada", "year": 1990, "month": 2, "day": 30})
    assert r.status_code == HTTP_UNPROCESSABLE_ENTITY
    assert r.json()["code"] == "INVALID_BIRTH_DATE"


def _broken_client(monkeypatch, seed_dir) -> TestClient:
    broken = ReadingService(
        ReferenceTables(FileTableSource(seed_dir)), clock=lambda: date(2025, 4, 15)
    )
    monkeypatch.setattr("cardology.api.routes_cards.service", broken)
    return TestClient(app)


def test_missing_table_is_503_envelope(monkeypatch, seed_dir):
    (seed_dir / "Yearly Forecasts.csv").unlink()
    r = _broken_client(monkeypatch, seed_dir).get(
        "/cards/forecast", params={"birth_card": "K♠", "age": 35}
    )
    assert r.status_code == HTTP_SERVICE_UNAVAILABLE
    body = r.json()
    assert body["code"] == "DATA_UNAVAILABLE"
    assert body["message"] == "Reference data unavailable, please retry"
    assert "Yearly" not in body["message"]


def test_undecodable_table_is_503_not_422(monkeypatch, seed_dir):
    (seed_dir / "Yearly Forecasts.csv").write_bytes(b"Birth Card,AGE\n\xff\xfe K,35\n")
    client = _broken_client(monkeypatch, seed_dir)
    r = client.post("/cards/reading", json={"name": "Ada", "year": 1990, "month": 1, "day": 1})
    assert r.status_code == HTTP_SERVICE_UNAVAILABLE
    assert r.json()["code"] == "DATA_UNAVAILABLE"
    r = client.get("/cards/forecast", params={"birth_card": "K♠", "age": 35})
    assert r.status_code == HTTP_SERVICE_UNAVAILABLE
    assert r.json()["code"] == "DATA_UNAVAILABLE"


def test_oversized_csv_field_is_503(monkeypatch, seed_dir):
    cell = "x" * OVERSIZED_FIELD
    (seed_dir / "Card to Activities MDBC.csv").write_text(
        f'Card,Entrepreneurial Activation\nK♥,"{cell}"\n', encoding="utf-8"
    )
    client = _broken_client(monkeypatch, seed_dir)
    r = client.get("/cards/activation", params={"card": "K♥"})
    assert r.status_code == HTTP_SERVICE_UNAVAILABLE
    assert r.json()["code"] == "DATA_UNAVAILABLE"
    r = client.post("/cards/reading", json={"name": "Ada", "year": 1990, "month": 1, "day": 1})
    assert r.status_code == HTTP_SERVICE_UNAVAILABLE
    assert r.json()["code"] == "DATA_UNAVAILABLE"


def test_header_only_table_with_wrong_columns_is_503(monkeypatch, seed_dir):
    (seed_dir / "Yearly Forecasts.csv").write_text("Card,Age,Mercury\n", encoding="utf-8")
    client = _broken_client(monkeypatch, seed_dir)
    r = client.get("/cards/forecast", params={"birth_card": "K♠", "age": 35})
    assert r.status_code == HTTP_SERVICE_UNAVAILABLE
    assert r.json()["code"] == "DATA_UNAVAILABLE"


def test_quick_answer_endpoint(client):
    reading = client.post(
        "/cards/reading", json={"name": "Ada", "year": 1990, "month": 1, "day": 1}
    ).json()
    r = client.post("/chat/quick", json={"question": "How old am I?", "reading": reading})
    assert r.status_code == HTTP_OK
    assert r.json()["answer"] == "You are **35 years old**."
    assert r.json()["needs_llm"] is False


def test_quick_answer_falls_back_to_llm(client):
    r = client.post("/chat/quick", json={"question": "Should I hire now?"})
    assert r.status_code == HTTP_OK
    assert r.json() == {"answer": None, "needs_llm": True, "quick_pattern": False}
