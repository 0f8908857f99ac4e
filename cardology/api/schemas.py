# Schémas Pydantic exposés par l'API (requêtes et réponses).

from pydantic import BaseModel, Field

from cardology.domain.entities import Reading


class ReadingRequest(BaseModel):
    """Requête de lecture complète.

    Champs:
    - name: str (prénom affiché)
    - year/month/day: date de naissance
    - age: int | None (âge imposé; calculé à partir de la date du jour si absent)
    """

    name: str = ""
    year: int
    month: int
    day: int
    age: int | None = Field(default=None, ge=0)


class NormalizeResponse(BaseModel):
    """Jeton canonique d'une notation de carte.

    `valid` est faux lorsque la notation n'a pas été reconnue; `token` vaut alors l'entrée
    débarrassée de ses espaces de bord.
    """

    input: str
    token: str
    valid: bool
    rank: str | None = None
    suit: str | None = None
    name: str | None = None
    slug: str
    image_path: str


class ActivationResponse(BaseModel):
    card: str
    activation: str


class QuickAnswerRequest(BaseModel):
    """Question libre et lecture de session déjà calculée."""

    question: str
    reading: Reading | None = None


class QuickAnswerResponse(BaseModel):
    """Réponse instantanée; `needs_llm` indique qu'il faut basculer vers le chat."""

    answer: str | None = None
    needs_llm: bool
    quick_pattern: bool = False
