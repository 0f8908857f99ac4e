"""Notation des cartes et normalisation vers le jeton canonique des tables.

Objectif du module
------------------
- Représenter une carte (rang, couleur) indépendamment de sa notation.
- Convertir les notations saisies ("King of Spades", "K ♠", "K♠") vers le jeton compact
  utilisé comme clé dans toutes les tables de référence.
- Fournir quelques dérivés d'affichage (chemin d'image, slug).
"""

from __future__ import annotations

import re
from dataclasses import dataclass

RANKS: tuple[str, ...] = ("A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K")
SUITS: tuple[str, ...] = ("♥", "♣", "♦", "♠")

RANK_WORDS: dict[str, str] = {
    "ace": "A",
    "two": "2",
    "three": "3",
    "four": "4",
    "five": "5",
    "six": "6",
    "seven": "7",
    "eight": "8",
    "nine": "9",
    "ten": "10",
    "jack": "J",
    "queen": "Q",
    "king": "K",
}
SUIT_WORDS: dict[str, str] = {
    "hearts": "♥",
    "heart": "♥",
    "diamonds": "♦",
    "diamond": "♦",
    "clubs": "♣",
    "club": "♣",
    "spades": "♠",
    "spade": "♠",
}
RANK_NAMES: dict[str, str] = {v: k.capitalize() for k, v in RANK_WORDS.items()}
SUIT_NAMES: dict[str, str] = {
    "♥": "Hearts",
    "♦": "Diamonds",
    "♣": "Clubs",
    "♠": "Spades",
}
SUIT_CODES: dict[str, str] = {"♠": "S", "♣": "C", "♦": "D", "♥": "H"}

CARD_BACK_IMAGE = "/cards/card-back.png"

_GLYPH_RE = re.compile(r"^(10|[2-9]|[AJQK])\s*([♠♣♦♥])$", re.IGNORECASE)
_COMPACT_RE = re.compile(r"^(10|[2-9]|[AJQK])([♠♣♦♥])$")
_ENGLISH_RE = re.compile(r"^(\w+)\s+of\s+(\w+)$", re.IGNORECASE)
# Sélecteur de variation emoji (♠️) parfois présent dans les saisies
_VARIATION_SELECTOR = "\ufe0f"


@dataclass(frozen=True)
class Card:
    """Carte à jouer identifiée par son rang et sa couleur.

    L'égalité porte sur le couple (rank, suit), jamais sur une représentation textuelle.
    """

    rank: str
    suit: str

    @classmethod
    def parse(cls, text: str | None) -> Card | None:
        """Analyse une notation (glyphe compact, glyphe espacé ou anglais).

        Retourne None si la notation ne désigne pas une des 52 cartes.
        """
        if not text:
            return None
        raw = str(text).replace(_VARIATION_SELECTOR, "").strip()
        m = _GLYPH_RE.match(raw)
        if m:
            return cls(rank=m.group(1).upper(), suit=m.group(2))
        m = _ENGLISH_RE.match(raw)
        if m:
            rank_word, suit_word = m.group(1).lower(), m.group(2).lower()
            rank = RANK_WORDS.get(rank_word) or rank_word.upper()
            suit = SUIT_WORDS.get(suit_word)
            if rank in RANKS and suit:
                return cls(rank=rank, suit=suit)
        return None

    @property
    def token(self) -> str:
        """Jeton compact canonique ("K♠")."""
        return f"{self.rank}{self.suit}"

    @property
    def spaced(self) -> str:
        """Glyphe espacé ("K ♠")."""
        return f"{self.rank} {self.suit}"

    @property
    def name(self) -> str:
        """Nom anglais complet ("King of Spades")."""
        return f"{RANK_NAMES[self.rank]} of {SUIT_NAMES[self.suit]}"

    def __str__(self) -> str:
        return self.token


def full_deck() -> list[Card]:
    """Retourne les 52 cartes (couleurs dans l'ordre cardologique ♥ ♣ ♦ ♠)."""
    return [Card(rank=r, suit=s) for s in SUITS for r in RANKS]


def normalize(card: str | None) -> str:
    """Convertit une notation de carte vers le jeton canonique des tables.

    - Vide/None → "".
    - Jeton déjà canonique → renvoyé tel quel.
    - "K ♠" ou "King of Spades" → "K♠".
    - Notation non reconnue → renvoyée telle quelle (espaces de bord retirés); l'appelant doit
      la traiter comme un possible échec de recherche.
    """
    if not card:
        return ""
    text = str(card).strip()
    if _COMPACT_RE.match(text):
        return text
    parsed = Card.parse(text)
    if parsed is None:
        return text
    return parsed.token


def card_image_path(card: str | None) -> str:
    """Chemin d'image d'une carte ("K♠" → "/cards/KS.png"), dos de carte sinon."""
    parsed = Card.parse(card)
    if parsed is None:
        return CARD_BACK_IMAGE
    return f"/cards/{parsed.rank}{SUIT_CODES[parsed.suit]}.png"


def card_slug(card: str | None) -> str:
    """Slug lisible ("K♠" → "king-of-spades"), "card-back" si non reconnu."""
    parsed = Card.parse(card)
    if parsed is None:
        return "card-back"
    return parsed.name.lower().replace(" ", "-")
