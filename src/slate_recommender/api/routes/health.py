"""
Health check endpoint.

Reports store reachability and whether scoring runs on the zero weight table.
An unreachable store makes the service unhealthy (503); degraded weights do
not, since slates are still built, only unranked.
"""

import time

from fastapi import APIRouter, Depends, Response, status
from fastapi.concurrency import run_in_threadpool

from ...models.api_models import HealthResponse
from ...scoring.weights import WeightsLoadResult
from ...store.database import SlateStore
from ...version import API_VERSION
from ..dependencies import get_store, get_weights

router = APIRouter()

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def health_check(
    response: Response,
    store: SlateStore = Depends(get_store),
    weights: WeightsLoadResult = Depends(get_weights),
) -> HealthResponse:
    store_reachable = await run_in_threadpool(store.ping)
    if not store_reachable:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status="healthy" if store_reachable else "unhealthy",
        version=API_VERSION,
        uptime_seconds=time.time() - _start_time,
        store_reachable=store_reachable,
        weights_version=weights.weights.version,
        weights_degraded=weights.degraded,
    )
