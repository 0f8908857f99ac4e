"""
Réponses instantanées à partir d'une lecture déjà calculée.

Certaines questions simples ("what's my birth card?", "what period am I in?") se répondent
directement depuis la lecture de session, sans appel au modèle de langage. `quick_answer`
renvoie None lorsque la question sort de ces motifs; l'appelant bascule alors vers le chat.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from cardology.app.metrics import QUICK_ANSWERS
from cardology.domain.activation import format_profile
from cardology.domain.entities import (
    DISPLAY_NAMES,
    PLANETARY_PERIODS,
    STRATEGIC_PERIODS,
    CardProfile,
    Reading,
    ResolvedPeriod,
)

PERIOD_DAYS = 52
ProfileLookup = Callable[[str], CardProfile | None]

_CONTENT_WORDS = ("say", "mean", "about")
_PERIOD_START_RE = re.compile(
    r"when does my (mercury|venus|mars|jupiter|saturn|uranus|neptune) period", re.IGNORECASE
)
_QUICK_PATTERNS = (
    "what is my",
    "what's my",
    "my birth card",
    "what period am i",
    "what are my",
    "how old am i",
    "when does my",
    "list",
    "show me",
)
_FOLLOW_UP = (
    "💡 *Ask me to interpret what this card means for your business and I'll consult the "
    "knowledge base.*"
)


def _has(q: str, *words: str) -> bool:
    return all(w in q for w in words)


def _asks_content(q: str) -> bool:
    return any(w in q for w in _CONTENT_WORDS)


def _current(reading: Reading) -> ResolvedPeriod | None:
    return next((p for p in reading.planetary_periods if p.is_current), None)


def _strategic(reading: Reading, period: str) -> ResolvedPeriod | None:
    return next((p for p in reading.strategic_outlook if p.period == period), None)


def _planetary(reading: Reading, period: str) -> ResolvedPeriod | None:
    return next((p for p in reading.planetary_periods if p.period == period), None)


def _start(p: ResolvedPeriod) -> str:
    return p.formatted_start_date or p.start_date or ""


def birth_card_answer(reading: Reading) -> str | None:
    card = reading.birth_card.normalized or reading.birth_card.card
    if not card:
        return None
    return (
        f"Your birth card is the **{card}**.\n\n"
        "This is your core identity card in cardology - it represents your innate gifts, "
        "challenges, and life purpose.\n\n"
        "💡 *Would you like to know more about what this card means for your business strategy?*"
    )


def current_period_answer(reading: Reading) -> str:
    p = _current(reading)
    if p is None:
        return (
            "I don't have your current planetary period data loaded. "
            "Please make sure your birthdate is entered correctly."
        )
    return (
        f"You are currently in your **{p.display_name} period** with the **{p.card}**.\n\n"
        f"📅 **Started:** {_start(p)}\n"
        f"⏱️ **Duration:** {PERIOD_DAYS} days\n\n"
        "Each planetary period brings different energies and opportunities. "
        f"Your {p.display_name} period with the {p.card} has specific implications for your "
        "business timing and strategy.\n\n"
        "💡 *Would you like to know what this period means for your business?*"
    )


def yearly_cards_answer(reading: Reading) -> str:
    if not reading.strategic_outlook:
        return (
            "I don't have your yearly forecast cards loaded. "
            "Please make sure your birthdate and age are entered correctly."
        )
    lines = [f"**Your Yearly Forecast Cards (Age {reading.age}):**", ""]
    lines += [f"• **{p.display_name}:** {p.card}" for p in reading.strategic_outlook]
    lines += [
        "",
        "These cards represent the major themes and energies influencing your year.",
        "",
        "💡 *Would you like me to interpret what these cards mean for your business strategy "
        "this year?*",
    ]
    return "\n".join(lines)


def strategic_card_answer(reading: Reading, period: str) -> str:
    name = DISPLAY_NAMES[period]
    p = _strategic(reading, period)
    if p is None:
        return (
            f"I don't have your {name} card data loaded. "
            "Please make sure your birthdate and age are entered correctly."
        )
    return (
        f"Your **{name} Card** for this year (age {reading.age}) is the **{p.card}**.\n\n"
        "💡 *Would you like to know what this card means for your business?*"
    )


def strategic_content_answer(reading: Reading, period: str, profiles: ProfileLookup) -> str:
    name = DISPLAY_NAMES[period]
    p = _strategic(reading, period)
    if p is None:
        return f"I don't have your {name} card data loaded."
    profile = profiles(p.card)
    if profile is None:
        return (
            f"Your **{name} Card** is the **{p.card}**.\n\n"
            "I have the card identified, but the detailed profile content isn't loaded yet.\n\n"
            f"{_FOLLOW_UP}"
        )
    return format_profile(profile, f"{name} Card (Age {reading.age})")


def birth_card_content_answer(reading: Reading, profiles: ProfileLookup) -> str:
    card = reading.birth_card.normalized or reading.birth_card.card
    if not card:
        return "I don't have your birth card data loaded."
    profile = reading.birth_card.profile or profiles(card)
    if profile is None:
        return (
            f"Your birth card is the **{card}**.\n\n"
            "The detailed profile content isn't loaded yet.\n\n"
            f"{_FOLLOW_UP}"
        )
    return format_profile(profile, "Birth Card")


def period_content_answer(
    reading: Reading, p: ResolvedPeriod | None, profiles: ProfileLookup, current: bool
) -> str:
    if p is None:
        if current:
            return "I don't have your current planetary period data loaded."
        return "I don't have your planetary periods data loaded."
    profile = profiles(p.card)
    if profile is None:
        label = "current " if current else ""
        return (
            f"Your {label}**{p.display_name} period** card is the **{p.card}**.\n\n"
            "The detailed profile content isn't loaded yet.\n\n"
            "💡 *Ask me to interpret what this period means for your business and I'll consult "
            "the knowledge base.*"
        )
    if current:
        head = (
            f"**Your Current {p.display_name} Period Card:** {p.card}\n"
            f"**Started:** {_start(p)} • **Duration:** {PERIOD_DAYS} days"
        )
    else:
        head = (
            f"**Your {p.display_name} Period Card:** {p.card}\n"
            f"**Starts:** {_start(p)} • **Duration:** {PERIOD_DAYS} days"
        )
        if p.is_current:
            head += " ✨ **CURRENT PERIOD**"
    return f"{head}\n\n{format_profile(profile)}"


def all_periods_answer(reading: Reading) -> str:
    if not reading.planetary_periods:
        return (
            "I don't have your planetary periods data loaded. "
            "Please make sure your birthdate is entered correctly."
        )
    lines = [
        "**Your Planetary Periods This Year:**",
        "",
        f"Each period lasts {PERIOD_DAYS} days and brings different energies.",
        "",
    ]
    for p in reading.planetary_periods:
        marker = " ← **CURRENT PERIOD**" if p.is_current else ""
        lines.append(f"• **{p.display_name}:** {p.card} (starts {_start(p)}){marker}")
    lines += [
        "",
        "💡 *Would you like to explore what a specific period means for your business timing?*",
    ]
    return "\n".join(lines)


def period_start_answer(reading: Reading, planet: str) -> str:
    p = _planetary(reading, planet.capitalize())
    if p is None:
        return f"I don't have your {planet} period data loaded."
    text = (
        f"Your **{p.display_name} period** starts on **{_start(p)}**.\n\n"
        f"**Card:** {p.card}\n"
        f"**Duration:** {PERIOD_DAYS} days"
    )
    if p.is_current:
        text += "\n\n✨ This is your **CURRENT PERIOD** right now!"
    return text + (
        "\n\n💡 *Would you like to know what this period means for your business strategy?*"
    )


def age_answer(reading: Reading) -> str:
    return f"You are **{reading.age} years old**."


def _match_answer(
    question: str | None,
    reading: Reading | None,
    profiles: ProfileLookup | None = None,
) -> str | None:
    if not question or reading is None:
        return None
    profiles = profiles or (lambda _card: None)
    q = question.lower().strip()

    if (
        "what is my birth card" in q
        or "what's my birth card" in q
        or ("my birth card" in q and "?" in q and not _asks_content(q))
        or q == "birth card?"
    ):
        return birth_card_answer(reading)

    if (
        "what period am i in" in q
        or "what planetary period" in q
        or ("current period" in q and not _asks_content(q))
        or _has(q, "which period", "now")
        or ("what period" in q and ("currently" in q or "right now" in q))
    ):
        return current_period_answer(reading)

    if (
        "what are my yearly cards" in q
        or "my yearly cards" in q
        or _has(q, "yearly forecast", "cards")
        or "year spread" in q
        or _has(q, "what cards", "this year")
    ):
        return yearly_cards_answer(reading)

    for period in STRATEGIC_PERIODS:
        word = DISPLAY_NAMES[period].lower()
        if word in q and _asks_content(q) and "period" not in q:
            return strategic_content_answer(reading, period, profiles)

    if ("birth card" in q or "my card" in q) and _asks_content(q):
        return birth_card_content_answer(reading, profiles)

    if _has(q, "current", "period") and _asks_content(q):
        return period_content_answer(reading, _current(reading), profiles, current=True)

    for period in PLANETARY_PERIODS:
        if period.lower() in q and ("card" in q or "period" in q) and _asks_content(q):
            return period_content_answer(
                reading, _planetary(reading, period), profiles, current=False
            )

    for period in STRATEGIC_PERIODS:
        word = DISPLAY_NAMES[period].lower()
        if word in q and "card" in q and "period" not in q:
            return strategic_card_answer(reading, period)

    if "period" in q and any(w in q for w in ("all", "list", "show", "what are")):
        return all_periods_answer(reading)

    m = _PERIOD_START_RE.search(q)
    if m:
        return period_start_answer(reading, m.group(1))

    if (
        "how old am i" in q
        or "what is my age" in q
        or "what's my age" in q
        or q == "my age?"
    ):
        return age_answer(reading)

    return None


def quick_answer(
    question: str | None,
    reading: Reading | None,
    profiles: ProfileLookup | None = None,
) -> str | None:
    """Réponse instantanée en markdown, ou None si le modèle de langage est nécessaire.

    `profiles` résout le profil d'une carte (défaut: aucun profil disponible).
    """
    answer = _match_answer(question, reading, profiles)
    QUICK_ANSWERS.labels(outcome="answered" if answer is not None else "fallback").inc()
    return answer


def can_answer_quickly(question: str | None) -> bool:
    """Indique si la question ressemble à une question simple de session."""
    if not question:
        return False
    q = question.lower().strip()
    return any(p in q for p in _QUICK_PATTERNS)
