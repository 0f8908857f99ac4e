"""Dépôt des tables de référence avec chargement paresseux et mémorisé.

Objectif du module
------------------
- Lire le texte CSV d'une table depuis un répertoire local ou une URL HTTP (httpx).
- Charger chaque table une seule fois par processus: le premier appelant déclenche le
  chargement, les appelants concurrents attendent le même chargement en cours.
- Ne pas mémoriser un échec: la requête suivante retente le chargement.
"""

from __future__ import annotations

import asyncio
import csv
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol
from urllib.parse import quote

import httpx
import structlog

from cardology.app.metrics import TABLE_LOAD_LATENCY, TABLE_LOADS, TABLE_ROWS
from cardology.infra.csv_tables import (
    BIRTHDATE_CARDS,
    CARD_ACTIVATIONS,
    CARD_PROFILES,
    PLANETARY_PERIODS_SCHEMA,
    SCHEMAS,
    YEARLY_FORECASTS,
    SchemaError,
    TableSchema,
    build_table,
)

if TYPE_CHECKING:
    from cardology.core.settings import Settings

log = structlog.get_logger(__name__)


class TableLoadError(RuntimeError):
    """Table de référence indisponible (stockage inaccessible ou contenu inutilisable)."""

    def __init__(self, table: str, reason: str):
        super().__init__(f"{table}: {reason}")
        self.table = table
        self.reason = reason


class TableSource(Protocol):
    """Fournit le texte brut d'un fichier de table."""

    async def read_text(self, filename: str) -> str: ...


class FileTableSource:
    """Lit les tables dans un répertoire du système de fichiers."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    async def read_text(self, filename: str) -> str:
        path = self.directory / filename
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as exc:
            raise TableLoadError(filename, f"cannot read {path}: {exc}") from exc


class HttpTableSource:
    """Télécharge les tables depuis une URL de base (ex: CDN ou bucket public)."""

    def __init__(self, base_url: str, timeout: float = 10.0, transport=None):
        self.base_url = base_url.rstrip("/")
        self._timeout = httpx.Timeout(timeout)
        self._transport = transport

    async def read_text(self, filename: str) -> str:
        url = f"{self.base_url}/{quote(filename)}"
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.get(url)
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise TableLoadError(filename, f"cannot fetch {url}: {exc}") from exc
        return resp.text


class LazyTable:
    """Chargement unique et partagé d'une table (single-flight).

    Le résultat d'un chargement réussi est conservé pour la durée du processus.
    """

    def __init__(self, schema: TableSchema, source: TableSource):
        self.schema = schema
        self._source = source
        self._value: Any = None
        self._inflight: asyncio.Future | None = None
        self.load_count = 0

    @property
    def loaded(self) -> bool:
        return self._value is not None

    async def get(self):
        if self._value is not None:
            return self._value
        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._load())
        inflight = self._inflight
        try:
            # shield: un appelant annulé n'interrompt pas le chargement des autres
            return await asyncio.shield(inflight)
        finally:
            if inflight.done() and self._inflight is inflight:
                self._inflight = None

    async def _load(self):
        name = self.schema.name
        self.load_count += 1
        start = time.perf_counter()
        try:
            text = await self._source.read_text(self.schema.filename)
            table = build_table(self.schema, text)
        except TableLoadError:
            TABLE_LOADS.labels(table=name, outcome="error").inc()
            log.error("table_load_failed", table=name)
            raise
        except (SchemaError, csv.Error) as exc:
            TABLE_LOADS.labels(table=name, outcome="error").inc()
            log.error("table_schema_invalid", table=name, error=str(exc))
            raise TableLoadError(name, str(exc)) from exc
        TABLE_LOAD_LATENCY.labels(table=name).observe(time.perf_counter() - start)
        TABLE_LOADS.labels(table=name, outcome="ok").inc()
        TABLE_ROWS.labels(table=name).set(len(table))
        log.info("table_loaded", table=name, rows=len(table))
        self._value = table
        return table


class ReferenceTables:
    """Dépôt applicatif des tables de référence, construit une fois au démarrage.

    Expose des accesseurs asynchrones en lecture seule; les tables sont immuables après
    chargement.
    """

    def __init__(self, source: TableSource):
        self.source = source
        self._tables: dict[str, LazyTable] = {s.name: LazyTable(s, source) for s in SCHEMAS}

    @classmethod
    def from_settings(cls, settings: Settings) -> ReferenceTables:
        base_url = getattr(settings, "TABLES_BASE_URL", None)
        if base_url:
            return cls(HttpTableSource(base_url, timeout=settings.TABLES_HTTP_TIMEOUT))
        return cls(FileTableSource(settings.TABLES_DIR))

    def table(self, name: str) -> LazyTable:
        return self._tables[name]

    async def birthdate_cards(self):
        return await self._tables[BIRTHDATE_CARDS.name].get()

    async def yearly_forecasts(self):
        return await self._tables[YEARLY_FORECASTS.name].get()

    async def planetary_periods(self):
        return await self._tables[PLANETARY_PERIODS_SCHEMA.name].get()

    async def card_activations(self):
        return await self._tables[CARD_ACTIVATIONS.name].get()

    async def card_profiles(self):
        return await self._tables[CARD_PROFILES.name].get()

    async def warm(self) -> None:
        """Charge toutes les tables (échec propagé)."""
        await asyncio.gather(*(t.get() for t in self._tables.values()))

    def status(self) -> dict[str, bool]:
        return {name: t.loaded for name, t in self._tables.items()}
