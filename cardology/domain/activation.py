"""
Textes d'activation et profils de cartes.

Les textes décrivent la carte elle-même et sont réutilisés partout où elle apparaît (carte de
naissance, carte annuelle, carte de période). Une carte absente donne "" ou None.
"""

from __future__ import annotations

import structlog

from cardology.app.metrics import LOOKUP_MISSES
from cardology.domain.entities import PERIOD_ORDER, CardProfile, Forecast
from cardology.domain.tables import CardActivationTable, CardProfileTable

log = structlog.get_logger(__name__)

PROFILE_NOT_AVAILABLE = "Birth card profile not available."


def lookup_activation(table: CardActivationTable, card: str | None) -> str:
    """Texte d'activation entrepreneuriale d'une carte, "" si inconnue."""
    if not card or not card.strip():
        return ""
    row = table.get(card)
    if row is None:
        LOOKUP_MISSES.labels(lookup="activation").inc()
        log.debug("activation_not_found", card=card)
        return ""
    return row.entrepreneurial_activation.strip()


def lookup_profile(table: CardProfileTable, card: str | None) -> CardProfile | None:
    """Profil d'une carte, None si inconnue."""
    if not card or not card.strip():
        return None
    row = table.get(card)
    if row is None:
        LOOKUP_MISSES.labels(lookup="profile").inc()
        log.debug("profile_not_found", card=card)
    return row


def activations_for_forecast(table: CardActivationTable, forecast: Forecast) -> dict[str, str]:
    """Même structure que la prévision, valeurs = textes d'activation.

    Un emplacement vide donne "" sans recherche.
    """
    out: dict[str, str] = {}
    for period in PERIOD_ORDER:
        card = getattr(forecast, period)
        out[period] = lookup_activation(table, card) if card else ""
    return out


def activations_for_cards(table: CardActivationTable, cards: list[str]) -> dict[str, str]:
    """Activation par carte pour une liste de cartes (les vides sont ignorées)."""
    return {c: lookup_activation(table, c) for c in cards if c and c.strip()}


def format_profile(profile: CardProfile | None, context: str = "") -> str:
    """Rend un profil en markdown (titre, description, zone de génie, motivation)."""
    if profile is None:
        return PROFILE_NOT_AVAILABLE
    parts: list[str] = []
    if context:
        parts.append(f"**Your {context}:** {profile.card}")
    else:
        parts.append(f"**{profile.card}**")
    if profile.description:
        parts.append(profile.description)
    if profile.zone_of_genius:
        zone = profile.zone_of_genius
        if "Zone of Genius:" not in zone:
            zone = f"**Zone of Genius:**\n{zone}"
        parts.append(zone)
    if profile.how_to_motivate:
        motivate = profile.how_to_motivate
        if "How to Motivate:" not in motivate and "Motivation:" not in motivate:
            motivate = f"**How to Motivate:**\n{motivate}"
        parts.append(motivate)
    return "\n\n".join(parts).strip()
