"""
Entités du domaine cardologique.

Ce module définit les enregistrements typés des tables de référence et les structures dérivées
(prévision annuelle, périodes résolues, lecture complète) produites à chaque requête.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

PLANETARY_PERIODS: tuple[str, ...] = (
    "Mercury",
    "Venus",
    "Mars",
    "Jupiter",
    "Saturn",
    "Uranus",
    "Neptune",
)
STRATEGIC_PERIODS: tuple[str, ...] = ("LongRange", "Pluto", "Result", "Support", "Development")
PERIOD_ORDER: tuple[str, ...] = PLANETARY_PERIODS + STRATEGIC_PERIODS
DISPLAY_NAMES: dict[str, str] = {p: p for p in PERIOD_ORDER} | {"LongRange": "Long Range"}

UNKNOWN_CARD = "Unknown"
UNKNOWN_CARD_NAME = "Unknown Card"


class BirthdateCardEntry(BaseModel):
    """Ligne de la table « Birthdate to Card » (clé "January 1")."""

    model_config = ConfigDict(frozen=True)

    date: str
    card: str
    card_name: str = ""


class YearlyForecastEntry(BaseModel):
    """Ligne de la table « Yearly Forecasts » (clé carte de naissance + âge)."""

    model_config = ConfigDict(frozen=True)

    birth_card: str
    age: str
    slots: dict[str, str]


class PlanetaryPeriodStartDates(BaseModel):
    """Dates de début (MM/DD, sans année) des 7 périodes planétaires pour un anniversaire."""

    model_config = ConfigDict(frozen=True)

    birthday: str
    Mercury: str = ""
    Venus: str = ""
    Mars: str = ""
    Jupiter: str = ""
    Saturn: str = ""
    Uranus: str = ""
    Neptune: str = ""

    def as_dict(self) -> dict[str, str]:
        """Retourne les dates par nom de période, dans l'ordre canonique."""
        return {p: getattr(self, p) for p in PLANETARY_PERIODS}


class CardActivation(BaseModel):
    """Texte d'activation entrepreneuriale associé à une carte."""

    model_config = ConfigDict(frozen=True)

    card: str
    entrepreneurial_activation: str = ""


class CardProfile(BaseModel):
    """Profil d'une carte: description, zone de génie et leviers de motivation."""

    model_config = ConfigDict(frozen=True)

    card: str
    description: str = ""
    zone_of_genius: str = ""
    how_to_motivate: str = ""


class BirthCardResult(BaseModel):
    """Résultat de la résolution de carte de naissance."""

    card: str
    name: str
    date_key: str | None = None


class Forecast(BaseModel):
    """Prévision annuelle: exactement 12 emplacements, vides si aucune carte."""

    Mercury: str = ""
    Venus: str = ""
    Mars: str = ""
    Jupiter: str = ""
    Saturn: str = ""
    Uranus: str = ""
    Neptune: str = ""
    LongRange: str = ""
    Pluto: str = ""
    Result: str = ""
    Support: str = ""
    Development: str = ""

    def as_dict(self) -> dict[str, str]:
        """Retourne les 12 emplacements dans l'ordre canonique."""
        return {p: getattr(self, p) for p in PERIOD_ORDER}

    def is_empty(self) -> bool:
        return not any(self.as_dict().values())


class ResolvedPeriod(BaseModel):
    """Période résolue pour l'affichage (planétaire ou stratégique)."""

    period: str
    display_name: str
    card: str
    is_planetary: bool
    is_strategic: bool
    start_date: str | None = None
    formatted_start_date: str | None = None
    is_current: bool = False
    activation: str = ""
    image_path: str


class Enrichment(BaseModel):
    """Périodes enrichies, période courante et dates de début brutes."""

    periods: list[ResolvedPeriod] = Field(default_factory=list)
    current_period: str | None = None
    start_dates: dict[str, str] = Field(default_factory=dict)


class BirthCardReading(BaseModel):
    """Carte de naissance annotée (activation, profil, image)."""

    card: str
    name: str
    normalized: str
    activation: str = ""
    profile: CardProfile | None = None
    image_path: str


class Reading(BaseModel):
    """Lecture complète d'un utilisateur, base de l'affichage et des réponses rapides."""

    name: str
    birth_date: str
    date_key: str
    age: int
    birth_card: BirthCardReading
    forecast: Forecast
    planetary_periods: list[ResolvedPeriod]
    strategic_outlook: list[ResolvedPeriod]
    all_periods: list[ResolvedPeriod]
    current_period: str | None = None
    start_dates: dict[str, str] = Field(default_factory=dict)
    activations: dict[str, str] = Field(default_factory=dict)
    generated_at: str
