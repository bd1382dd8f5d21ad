"""
Version endpoint: API and component versions plus the weight table in use.
"""

from fastapi import APIRouter, Depends

from ...models.api_models import VersionResponse
from ...scoring.weights import WeightsLoadResult
from ...version import API_VERSION, get_component_versions
from ..dependencies import get_weights

router = APIRouter()


@router.get("/version", response_model=VersionResponse)
async def get_version(weights: WeightsLoadResult = Depends(get_weights)) -> VersionResponse:
    """Return versions and whether scoring runs on a degraded weight table."""
    return VersionResponse(
        api_version=API_VERSION,
        components=get_component_versions(),
        weights_version=weights.weights.version,
        weights_degraded=weights.degraded,
    )
