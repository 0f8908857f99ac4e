"""
Endpoint de santé pour vérifier la disponibilité de l'API et des tables de référence.

Expose `/health` pour signaler l'état général et l'état de chargement de chaque table.
"""

from fastapi import APIRouter

from cardology.core.container import container

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    """Vérifie la disponibilité de l'API et la source des tables."""
    return {
        "status": "ok",
        "tables_backend": getattr(container, "tables_backend", "unknown"),
        "tables": container.tables.status(),
    }
