"""
Request-scoped access to the objects built at startup.

The lifespan handler stores them on ``app.state``; tests replace them with
``app.dependency_overrides``.
"""

from fastapi import Request

from ..pipeline import SlatePipeline
from ..scoring.weights import WeightsLoadResult
from ..store.database import SlateStore


def get_pipeline(request: Request) -> SlatePipeline:
    return request.app.state.pipeline


def get_weights(request: Request) -> WeightsLoadResult:
    return request.app.state.weights


def get_store(request: Request) -> SlateStore:
    return request.app.state.store
