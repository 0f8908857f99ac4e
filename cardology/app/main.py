"""
Application principale FastAPI.

Ce module assemble tous les composants de l'application : middlewares,
routes, métriques et gestion des erreurs du moteur cardologique.

Responsabilités du module:
- Initialiser le logging structuré
- Construire l'application FastAPI avec son titre/debug
- Ajouter les middlewares (request id, métriques)
- Traduire les erreurs métier en enveloppes JSON
- Monter les routers (santé, cartes, chat, métriques)
"""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

from cardology.api.errors import handle_http_exception, handle_table_load_error
from cardology.api.routes_cards import router as cards_router
from cardology.api.routes_chat import router as chat_router
from cardology.api.routes_health import router as health_router
from cardology.app.metrics import PrometheusMiddleware, metrics_router
from cardology.core.container import container
from cardology.core.logging import setup_logging
from cardology.infra.table_repository import TableLoadError
from cardology.middlewares.request_id import RequestIDMiddleware

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Précharge les tables au démarrage si demandé; un échec n'empêche pas le démarrage."""
    if container.settings.WARM_TABLES_ON_STARTUP:
        try:
            await container.tables.warm()
        except TableLoadError as exc:
            log.error("tables_warmup_failed", table=exc.table, reason=exc.reason)
    yield


def create_app() -> FastAPI:
    """
    Construit et retourne l'application FastAPI prête à l'usage.

    Étapes:
    - Configure le logging structuré (structlog)
    - Lit les paramètres d'exécution
    - Ajoute les middlewares utiles au debug/traçabilité
    - Enregistre les gestionnaires d'erreurs (503 si table indisponible)
    - Publie les routes de santé, de cartes et de chat
    """
    settings = container.settings
    setup_logging(settings.LOG_LEVEL)
    app = FastAPI(title=settings.APP_NAME, debug=settings.APP_DEBUG, lifespan=lifespan)
    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_exception_handler(TableLoadError, handle_table_load_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.include_router(health_router)
    app.include_router(cards_router)
    app.include_router(chat_router)
    app.include_router(metrics_router)
    return app


app = create_app()
