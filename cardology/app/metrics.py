"""
Métriques Prometheus pour l'application.

Ce module définit les métriques HTTP, de chargement des tables de référence et d'échecs de
recherche, ainsi que l'endpoint `/metrics` et le middleware de mesure.
"""

import time

from fastapi import APIRouter, Request
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

metrics_router = APIRouter()

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "route", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "Latency of HTTP requests", ["route"]
)

# Reference tables
TABLE_LOADS = Counter(
    "reference_table_loads_total",
    "Reference table load attempts",
    ["table", "outcome"],
)
TABLE_LOAD_LATENCY = Histogram(
    "reference_table_load_seconds",
    "Latency of reference table loads",
    ["table"],
)
TABLE_ROWS = Gauge(
    "reference_table_rows",
    "Rows held by each loaded reference table",
    ["table"],
)
TABLE_ROWS_REJECTED = Counter(
    "reference_table_rows_rejected_total",
    "Rows rejected by schema validation at load time",
    ["table"],
)

# Domain lookups
LOOKUP_MISSES = Counter(
    "card_lookup_misses_total",
    "Lookups that found no matching table row",
    ["lookup"],
)
QUICK_ANSWERS = Counter(
    "quick_answers_total",
    "Session quick-answer attempts",
    ["outcome"],
)


@metrics_router.get("/metrics")
def metrics():
    """
    Expose les métriques Prometheus au format texte.

    Returns:
        Response: Réponse HTTP contenant les métriques au format Prometheus.
    """
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware Prometheus pour mesurer les métriques HTTP.

    Collecte le nombre de requêtes et la latence par route.
    """

    async def dispatch(self, request: Request, call_next):
        """
        Traite une requête HTTP et collecte les métriques.

        Args:
            request: Requête HTTP entrante.
            call_next: Fonction pour appeler le middleware suivant.

        Returns:
            Response: Réponse HTTP avec métriques collectées.
        """
        start = time.perf_counter()
        response: Response = await call_next(request)
        route = request.scope.get("path", "unknown")
        REQUEST_COUNT.labels(request.method, route, str(response.status_code)).inc()
        REQUEST_LATENCY.labels(route).observe(time.perf_counter() - start)
        return response
