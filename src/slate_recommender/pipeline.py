"""
Slate pipeline orchestration.

Stages: fetch candidates -> score -> sort -> select -> persist.

Per-run states:

    fetching -> scoring -> selecting -> persisting -> done | failed

An empty pool skips scoring and selection and persists an item-less slate.
Only the persisting stage retries (once, inside SlatePersistor).
"""

import time
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

import structlog

from slate_recommender.candidates.source import DEFAULT_POOL_LIMIT, CandidateSource
from slate_recommender.models.recommendation import RequestContext, Scored
from slate_recommender.models.slate import SlateResult
from slate_recommender.persistence.persistor import SlatePersistor
from slate_recommender.scoring.scorer import Scorer
from slate_recommender.scoring.weights import WeightsLoadResult
from slate_recommender.selection.diversity import (
    DiversityOptions,
    NearDuplicatePredicate,
    select_diverse,
)
from slate_recommender.store.database import SlateStore
from slate_recommender.version import get_component_versions


logger = structlog.get_logger(__name__)


class PipelineState(str, Enum):
    """States of a single pipeline run."""
    FETCHING = "fetching"
    SCORING = "scoring"
    SELECTING = "selecting"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


def rank_by_score_then_recency(scored: List[Scored]) -> List[Scored]:
    """Order by score descending, newer saves first on equal score."""
    return sorted(scored, key=lambda s: (s.score, s.saved_at), reverse=True)


class SlatePipeline:
    """
    Build and persist one recommendation slate per call.

    All collaborators are injected; construct one pipeline at startup and
    share it across requests.
    """

    def __init__(
        self,
        store: SlateStore,
        scorer: Scorer,
        candidate_source: Optional[CandidateSource] = None,
        persistor: Optional[SlatePersistor] = None,
        near_duplicate: Optional[NearDuplicatePredicate] = None,
        pool_limit: int = DEFAULT_POOL_LIMIT,
        min_distinct_themes: int = 2,
        require_short_if_available: bool = True,
        weights_degraded: bool = False,
    ):
        self.store = store
        self.scorer = scorer
        self.candidate_source = candidate_source or CandidateSource(store)
        self.persistor = persistor or SlatePersistor(store)
        self.near_duplicate = near_duplicate
        self.pool_limit = pool_limit
        self.min_distinct_themes = min_distinct_themes
        self.require_short_if_available = require_short_if_available
        self.weights_degraded = weights_degraded

    @classmethod
    def from_settings(
        cls,
        store: SlateStore,
        weights: WeightsLoadResult,
        settings=None,
        near_duplicate: Optional[NearDuplicatePredicate] = None,
    ) -> "SlatePipeline":
        if settings is None:
            from slate_recommender.config import settings
        return cls(
            store,
            Scorer(weights.weights),
            candidate_source=CandidateSource.from_settings(store, settings),
            near_duplicate=near_duplicate,
            pool_limit=settings.candidate_pool_limit,
            min_distinct_themes=settings.min_distinct_themes,
            require_short_if_available=settings.require_short_if_available,
            weights_degraded=weights.degraded,
        )

    def build_slate(
        self,
        user_id: str,
        k: int,
        context: RequestContext,
        now: Optional[datetime] = None,
    ) -> SlateResult:
        """
        Run the full pipeline for one user.

        Args:
            user_id: Requesting user (already validated)
            k: Maximum slate size (bounded by the caller)
            context: Normalized request context
            now: Reference time for candidate flags (default: now, UTC)

        Returns:
            SlateResult with the new slate id and ranked items

        Raises:
            StoreError: Candidate fetch failure, or persistence failure after its retry
        """
        run_id = str(uuid.uuid4())
        start_time = time.time()
        log = logger.bind(run_id=run_id, user_id=user_id, k=k)
        state = PipelineState.FETCHING

        try:
            log.info("pipeline_state", state=state.value)
            pool = self.candidate_source.fetch(user_id, pool_limit=self.pool_limit, now=now)

            if not pool:
                state = PipelineState.PERSISTING
                log.info("pipeline_state", state=state.value, empty_pool=True)
                result = self.persistor.persist_empty(user_id)
            else:
                state = PipelineState.SCORING
                log.info("pipeline_state", state=state.value, pool_size=len(pool))
                scored = self.scorer.score_all(pool, context.to_score_context())
                ranked = rank_by_score_then_recency(scored)

                state = PipelineState.SELECTING
                log.info("pipeline_state", state=state.value)
                selection = select_diverse(ranked, k, self._diversity_options(context))

                state = PipelineState.PERSISTING
                log.info("pipeline_state", state=state.value, selected=len(selection))
                result = self.persistor.persist(user_id, selection, self._slate_meta(context))

        except Exception as e:
            log.error(
                "pipeline_state",
                state=PipelineState.FAILED.value,
                failed_in=state.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        log.info(
            "pipeline_state",
            state=PipelineState.DONE.value,
            slate_id=result.slate_id,
            items_count=len(result.items),
            processing_time_ms=round((time.time() - start_time) * 1000, 2),
        )
        return result

    def _diversity_options(self, context: RequestContext) -> DiversityOptions:
        return DiversityOptions(
            allow_same_domain=bool(context.allow_same_domain),
            require_short_if_available=self.require_short_if_available,
            min_distinct_themes=self.min_distinct_themes,
            near_duplicate=self.near_duplicate,
        )

    def _slate_meta(self, context: RequestContext) -> Dict[str, Any]:
        return {
            "weights_version": self.scorer.weights.version,
            "weights_degraded": self.weights_degraded,
            "context": context.model_dump(mode="json"),
            "versions": get_component_versions(),
        }
