"""
Recommendation endpoint.

POST /v1/recommend builds, persists and returns a slate for one user.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from ...config import settings
from ...context import normalize_context
from ...errors import StoreError
from ...models.api_models import ErrorResponse, RecommendContextIn, RecommendRequest
from ...models.slate import SlateResult
from ...pipeline import SlatePipeline
from ..dependencies import get_pipeline


logger = structlog.get_logger(__name__)

router = APIRouter()


def resolve_k(requested: Optional[int]) -> int:
    """Default and cap the requested slate size."""
    k = requested if requested is not None else settings.default_k
    return min(k, settings.max_k)


@router.post(
    "/recommend",
    response_model=SlateResult,
    status_code=status.HTTP_200_OK,
    responses={500: {"model": ErrorResponse}},
)
async def recommend(
    body: RecommendRequest,
    request: Request,
    pipeline: SlatePipeline = Depends(get_pipeline),
):
    """
    Build a diversity-constrained slate for the user.

    Examples:
        POST /v1/recommend
        {
            "userId": "u-123",
            "k": 5,
            "context": {"device": "mobile", "tz": "Europe/Rome"}
        }
    """
    raw = body.context or RecommendContextIn()
    context = normalize_context(
        device=raw.device,
        local_time_of_day=raw.local_time_of_day,
        allow_same_domain=raw.allow_same_domain,
        tz=raw.tz,
    )
    k = resolve_k(body.k)

    logger.info(
        "recommend_request_received",
        user_id=body.user_id,
        k=k,
        device=context.device.value,
        local_time_of_day=context.local_time_of_day.value,
    )

    try:
        # Pipeline does blocking database I/O
        return await run_in_threadpool(pipeline.build_slate, body.user_id, k, context)
    except StoreError as e:
        logger.error(
            "recommend_failed",
            user_id=body.user_id,
            error=str(e),
            error_type=type(e).__name__,
        )
        error = ErrorResponse(
            error=type(e).__name__,
            detail=f"Slate could not be built: {type(e).__name__}",
            request_id=getattr(request.state, "request_id", None),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error.model_dump(),
        )
