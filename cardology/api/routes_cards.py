"""
Routes liées aux cartes: normalisation, carte de naissance, prévision annuelle et lecture.

Ce module regroupe les endpoints `/cards`. Une recherche sans correspondance n'est jamais une
erreur HTTP (sentinelle ou valeurs vides), à l'exception du profil introuvable (404). Une table
de référence indisponible remonte en `TableLoadError`, traduite en 503 par l'application.
"""

from fastapi import APIRouter, Query

from cardology.api.errors import invalid_birth_date, not_found
from cardology.api.schemas import (
    ActivationResponse,
    NormalizeResponse,
    ReadingRequest,
)
from cardology.core.container import container
from cardology.domain.cards import Card, card_image_path, card_slug, normalize
from cardology.domain.entities import BirthCardResult, CardProfile, Forecast, Reading
from cardology.domain.services import InvalidBirthDate

router = APIRouter(prefix="/cards", tags=["cards"])
service = container.reading_service


@router.get("/normalize", response_model=NormalizeResponse)
def normalize_card(card: str = Query(default="")):
    """Convertit une notation de carte ("K ♠", "King of Spades") en jeton canonique."""
    token = normalize(card)
    parsed = Card.parse(token)
    return NormalizeResponse(
        input=card,
        token=token,
        valid=parsed is not None,
        rank=parsed.rank if parsed else None,
        suit=parsed.suit if parsed else None,
        name=parsed.name if parsed else None,
        slug=card_slug(token),
        image_path=card_image_path(token),
    )


@router.get("/birth-card", response_model=BirthCardResult)
async def birth_card(month: int, day: int):
    """
    Retourne la carte de naissance pour un anniversaire (l'année n'intervient pas).

    Retour: `BirthCardResult`, sentinelle "Unknown" si la date est absente de la table.
    """
    return await service.birth_card(month, day)


@router.get("/forecast", response_model=Forecast)
async def forecast(birth_card: str, age: int = Query(ge=0)):
    """Prévision annuelle (12 emplacements) pour une carte de naissance et un âge."""
    return await service.forecast(birth_card, age)


@router.get("/activation", response_model=ActivationResponse)
async def activation(card: str):
    """Texte d'activation entrepreneuriale d'une carte ("" si inconnue)."""
    token = normalize(card)
    return ActivationResponse(card=token, activation=await service.activation(token))


@router.get("/profile", response_model=CardProfile)
async def profile(card: str):
    """Profil d'une carte; 404 si la carte n'a pas de profil."""
    found = await service.profile(card)
    if found is None:
        raise not_found(f"No profile for card {card!r}")
    return found


@router.post("/reading", response_model=Reading)
async def reading(payload: ReadingRequest):
    """
    Construit la lecture complète d'un utilisateur.

    Paramètres:
    - payload: `ReadingRequest` (prénom, date de naissance, âge optionnel).

    Retour: `Reading` (carte de naissance, prévision, périodes, période courante, activations).
    """
    try:
        return await service.reading(
            payload.name, payload.year, payload.month, payload.day, payload.age
        )
    except InvalidBirthDate as err:
        raise invalid_birth_date(f"Invalid birth date: {err}") from err
