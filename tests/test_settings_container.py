"""
Tests pour la configuration et le conteneur d'application.

Ce module vérifie la lecture d'un fichier .env explicite, les valeurs par défaut des tables de
référence et le choix de la source des tables par le conteneur.
"""

from __future__ import annotations

import importlib
import inspect
from pathlib import Path
from typing import Any

from cardology.core.container import Container
from cardology.core.settings import DEFAULT_TABLES_DIR, get_settings
from cardology.domain.services import ReadingService
from cardology.infra.table_repository import FileTableSource, HttpTableSource, ReferenceTables

CUSTOM_TIMEOUT = 2.5


def test_settings_reads_env_file(tmp_path: Path, monkeypatch) -> None:
    """Les variables d'un fichier ENV_FILE sont appliquées aux settings."""
    env = tmp_path / ".env.custom"
    env.write_text(
        "PLANETARY_WRAP_PREVIOUS_YEAR=false\nTABLES_HTTP_TIMEOUT=2.5\n", encoding="utf-8"
    )
    monkeypatch.setenv("ENV_FILE", str(env))
    settings_mod = importlib.import_module("cardology.core.settings")
    importlib.reload(settings_mod)
    try:
        s = settings_mod.get_settings()
        assert s.PLANETARY_WRAP_PREVIOUS_YEAR is False
        assert s.TABLES_HTTP_TIMEOUT == CUSTOM_TIMEOUT
    finally:
        monkeypatch.delenv("ENV_FILE")
        importlib.reload(settings_mod)


def test_default_tables_dir_ships_birthdate_table(monkeypatch: Any) -> None:
    monkeypatch.delenv("TABLES_DIR", raising=False)
    assert get_settings().TABLES_DIR == DEFAULT_TABLES_DIR
    assert (Path(DEFAULT_TABLES_DIR) / "Birthdate to Card.csv").exists()
    assert (Path(DEFAULT_TABLES_DIR) / "Planetary Periods.csv").exists()


def test_container_file_source(monkeypatch: Any, tmp_path: Path) -> None:
    monkeypatch.delenv("TABLES_BASE_URL", raising=False)
    monkeypatch.setenv("TABLES_DIR", str(tmp_path))
    c = Container()
    assert c.tables_backend == "file"
    assert isinstance(c.tables.source, FileTableSource)
    assert c.tables.source.directory == tmp_path


def test_container_http_source_and_wrap_flag(monkeypatch: Any) -> None:
    monkeypatch.setenv("TABLES_BASE_URL", "https://cdn.example.test/tables")
    monkeypatch.setenv("PLANETARY_WRAP_PREVIOUS_YEAR", "false")
    c = Container()
    assert c.tables_backend == "http"
    assert isinstance(c.tables.source, HttpTableSource)
    assert c.reading_service.wrap_previous_year is False


def test_reference_tables_from_real_settings(monkeypatch: Any, tmp_path: Path) -> None:
    """`from_settings` et `ReadingService` acceptent les types déclarés du conteneur."""
    monkeypatch.delenv("TABLES_BASE_URL", raising=False)
    monkeypatch.setenv("TABLES_DIR", str(tmp_path))
    tables = ReferenceTables.from_settings(get_settings())
    assert isinstance(tables.source, FileTableSource)
    settings_param = inspect.signature(ReferenceTables.from_settings).parameters["settings"]
    tables_param = inspect.signature(ReadingService).parameters["tables"]
    assert settings_param.annotation == "Settings"
    assert tables_param.annotation == "ReferenceTables"
    assert ReadingService(tables).tables is tables
