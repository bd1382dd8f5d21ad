"""
Candidate source.

Reads a bounded, newest-first pool of the user's saved items and annotates each
one with the flags the scorer uses.
"""

import time
from datetime import datetime
from typing import Dict, List, Optional

import structlog

from slate_recommender.models.recommendation import Candidate
from slate_recommender.store.database import SlateStore
from slate_recommender.store.models import Content
from slate_recommender.store.queries import (
    count_open_events,
    list_domain_stats,
    list_saved_items,
)

from .flags import (
    FRESH_FORGOTTEN_MAX_DAYS,
    FRESH_FORGOTTEN_MIN_DAYS,
    FREQUENT_SOURCE_MIN_SAVES,
    UNKNOWN_DOMAIN,
    frequent_source_threshold,
    is_fresh_forgotten,
    parse_reading_bucket,
    utcnow,
)


logger = structlog.get_logger(__name__)

DEFAULT_POOL_LIMIT = 500
DEFAULT_DOMAIN_STATS_LIMIT = 50


class CandidateSource:
    """
    Fetch and annotate a user's candidate pool.

    Open counts are looked up one candidate at a time inside a single read
    session.
    """

    def __init__(
        self,
        store: SlateStore,
        domain_stats_limit: int = DEFAULT_DOMAIN_STATS_LIMIT,
        frequent_source_min_saves: int = FREQUENT_SOURCE_MIN_SAVES,
        fresh_forgotten_min_days: int = FRESH_FORGOTTEN_MIN_DAYS,
        fresh_forgotten_max_days: int = FRESH_FORGOTTEN_MAX_DAYS,
    ):
        self.store = store
        self.domain_stats_limit = domain_stats_limit
        self.frequent_source_min_saves = frequent_source_min_saves
        self.fresh_forgotten_min_days = fresh_forgotten_min_days
        self.fresh_forgotten_max_days = fresh_forgotten_max_days

        self.logger = logger.bind(component="candidate_source")

    @classmethod
    def from_settings(cls, store: SlateStore, settings=None) -> "CandidateSource":
        if settings is None:
            from slate_recommender.config import settings
        return cls(
            store,
            domain_stats_limit=settings.domain_stats_limit,
            frequent_source_min_saves=settings.frequent_source_min_saves,
            fresh_forgotten_min_days=settings.fresh_forgotten_min_days,
            fresh_forgotten_max_days=settings.fresh_forgotten_max_days,
        )

    def fetch(
        self,
        user_id: str,
        pool_limit: int = DEFAULT_POOL_LIMIT,
        now: Optional[datetime] = None,
    ) -> List[Candidate]:
        """
        Fetch up to ``pool_limit`` annotated candidates, newest save first.

        Args:
            user_id: Owner of the saved items
            pool_limit: Maximum pool size
            now: Reference time for the fresh-forgotten window (default: now, UTC)

        Returns:
            List of Candidate; empty when the user has no saved items
        """
        start_time = time.time()
        now = now or utcnow()

        with self.store.session() as session:
            contents = list_saved_items(session, user_id, pool_limit)
            if not contents:
                self.logger.info("candidate_pool_empty", user_id=user_id)
                return []

            domain_stats = list_domain_stats(session, user_id, self.domain_stats_limit)
            domain_save_map: Dict[str, int] = {ds.domain: ds.save_count for ds in domain_stats}
            threshold = frequent_source_threshold(
                [ds.save_count for ds in domain_stats],
                min_saves=self.frequent_source_min_saves,
            )

            candidates = []
            for content in contents:
                open_count = count_open_events(session, user_id, content.id)
                candidates.append(
                    self._annotate(content, open_count, domain_save_map, threshold, now)
                )

        self.logger.info(
            "candidate_pool_fetched",
            user_id=user_id,
            pool_size=len(candidates),
            domain_stats=len(domain_save_map),
            frequent_source_threshold=threshold,
            processing_time_ms=round((time.time() - start_time) * 1000, 2),
        )

        return candidates

    def _annotate(
        self,
        content: Content,
        open_count: int,
        domain_save_map: Dict[str, int],
        threshold: int,
        now: datetime,
    ) -> Candidate:
        never_opened = open_count == 0
        domain = content.domain or UNKNOWN_DOMAIN

        # First feature row carries the reading bucket
        reading_bucket = None
        if content.features:
            reading_bucket = parse_reading_bucket(content.features[0].reading_bucket)

        theme_ids = tuple(t.theme_id for t in content.theme_items if t.theme_id)

        return Candidate(
            id=content.id,
            domain=domain,
            saved_at=content.saved_at,
            reading_bucket=reading_bucket,
            theme_ids=theme_ids,
            never_opened=never_opened,
            is_fresh_forgotten=is_fresh_forgotten(
                content.saved_at,
                never_opened,
                now,
                min_days=self.fresh_forgotten_min_days,
                max_days=self.fresh_forgotten_max_days,
            ),
            is_frequent_source=domain_save_map.get(domain, 0) >= threshold,
        )
