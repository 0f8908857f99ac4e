from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING

import structlog

from cardology.domain.activation import (
    activations_for_forecast,
    lookup_activation,
    lookup_profile,
)
from cardology.domain.cards import card_image_path, normalize
from cardology.domain.entities import (
    UNKNOWN_CARD,
    BirthCardReading,
    BirthCardResult,
    CardProfile,
    Enrichment,
    Forecast,
    Reading,
)
from cardology.domain.forecast import empty_forecast, resolve_birth_card, resolve_forecast
from cardology.domain.planetary import enrich

if TYPE_CHECKING:
    from cardology.infra.table_repository import ReferenceTables

log = structlog.get_logger(__name__)


class InvalidBirthDate(ValueError):
    """Date de naissance impossible (ex. 30 février)."""


def compute_age(birth_date: date, today: date) -> int:
    """Âge en années révolues (décrémenté si l'anniversaire n'est pas encore passé)."""
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return max(age, 0)


class ReadingService:
    """Service métier de lecture cardologique.

    Responsabilités:
    - Charger les tables via `tables` (dépôt `ReferenceTables`, chargement unique).
    - Enchaîner carte de naissance → prévision → périodes → activations/profils.
    - Fournir "aujourd'hui" via `clock` pour des calculs déterministes en test.
    """

    def __init__(
        self,
        tables: ReferenceTables,
        clock: Callable[[], date] | None = None,
        wrap_previous_year: bool = True,
    ):
        """Initialise le service avec ses dépendances.

        Paramètres:
        - tables: dépôt des tables de référence (accesseurs asynchrones).
        - clock: fonction retournant la date du jour (défaut: `date.today`).
        - wrap_previous_year: règle de période courante en début d'année civile.
        """
        self.tables = tables
        self.clock = clock or date.today
        self.wrap_previous_year = wrap_previous_year

    async def birth_card(self, month: int, day: int) -> BirthCardResult:
        return resolve_birth_card(await self.tables.birthdate_cards(), month, day)

    async def forecast(self, birth_card: str, age: int) -> Forecast:
        return resolve_forecast(await self.tables.yearly_forecasts(), birth_card, age)

    async def activation(self, card: str) -> str:
        return lookup_activation(await self.tables.card_activations(), card)

    async def profile(self, card: str) -> CardProfile | None:
        return lookup_profile(await self.tables.card_profiles(), card)

    async def activations(self, forecast: Forecast) -> dict[str, str]:
        return activations_for_forecast(await self.tables.card_activations(), forecast)

    async def enrich(
        self,
        forecast: Forecast,
        month: int,
        day: int,
        activations: dict[str, str] | None = None,
    ) -> Enrichment:
        return enrich(
            await self.tables.planetary_periods(),
            forecast,
            month,
            day,
            self.clock(),
            activations,
            self.wrap_previous_year,
        )

    async def reading(
        self, name: str, year: int, month: int, day: int, age: int | None = None
    ) -> Reading:
        """Construit la lecture complète d'un utilisateur.

        Paramètres:
        - name: prénom affiché.
        - year/month/day: date de naissance (InvalidBirthDate si date invalide).
        - age: âge imposé; à défaut calculé à partir de la date du jour.

        Retour: `Reading` avec carte de naissance annotée, prévision, périodes planétaires
        et stratégiques, période courante et activations.
        """
        try:
            born = date(year, month, day)
        except ValueError as exc:
            raise InvalidBirthDate(str(exc)) from exc
        today = self.clock()
        if age is None:
            age = compute_age(born, today)
        birth = await self.birth_card(month, day)
        if birth.card == UNKNOWN_CARD:
            forecast = empty_forecast()
        else:
            forecast = await self.forecast(birth.card, age)
        activations = await self.activations(forecast)
        enriched = await self.enrich(forecast, month, day, activations)
        token = normalize(birth.card) if birth.card != UNKNOWN_CARD else ""
        birth_reading = BirthCardReading(
            card=birth.card,
            name=birth.name,
            normalized=token,
            activation=await self.activation(token) if token else "",
            profile=await self.profile(token) if token else None,
            image_path=card_image_path(token),
        )
        log.info(
            "reading_built",
            birth_card=birth.card,
            age=age,
            current_period=enriched.current_period,
        )
        return Reading(
            name=name,
            birth_date=born.isoformat(),
            date_key=birth.date_key or "",
            age=age,
            birth_card=birth_reading,
            forecast=forecast,
            planetary_periods=[p for p in enriched.periods if p.is_planetary],
            strategic_outlook=[p for p in enriched.periods if p.is_strategic],
            all_periods=enriched.periods,
            current_period=enriched.current_period,
            start_dates=enriched.start_dates,
            activations=activations,
            generated_at=datetime.now(timezone.utc).isoformat(),
        )

    async def profile_lookup(self) -> Callable[[str], CardProfile | None]:
        """Résolveur synchrone de profils, pour le rendu des réponses rapides."""
        table = await self.tables.card_profiles()
        return lambda card: lookup_profile(table, card)
