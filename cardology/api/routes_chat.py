"""Routes de chat: réponses instantanées à partir de la lecture de session.

Seules les questions simples sont traitées ici; `needs_llm` signale au client qu'il doit
basculer vers le chat assisté.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter

from cardology.api.schemas import QuickAnswerRequest, QuickAnswerResponse
from cardology.core.container import container
from cardology.domain.quick_answers import can_answer_quickly, quick_answer
from cardology.infra.table_repository import TableLoadError

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])
service = container.reading_service


@router.post("/quick", response_model=QuickAnswerResponse)
async def quick(payload: QuickAnswerRequest):
    """Répond depuis la lecture si possible, sinon indique qu'il faut le modèle de langage.

    Sans table de profils, les réponses de contenu se limitent au nom de la carte.
    """
    profiles = None
    if payload.reading is not None:
        try:
            profiles = await service.profile_lookup()
        except TableLoadError as exc:
            log.warning("quick_answer_profiles_unavailable", table=exc.table)
    answer = quick_answer(payload.question, payload.reading, profiles)
    return QuickAnswerResponse(
        answer=answer,
        needs_llm=answer is None,
        quick_pattern=can_answer_quickly(payload.question),
    )
