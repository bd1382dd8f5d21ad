"""
Global pytest fixtures and configuration for test suite.

This module provides reusable fixtures for:
- An in-memory SQLite store with the full schema
- Seeding saved items, open events and domain stats
- Building scored candidates for selector tests
- Weight tables
"""

import uuid
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional

import pytest
import structlog

from slate_recommender.models.recommendation import ReadingBucket, Scored
from slate_recommender.scoring.weights import ScoringWeights
from slate_recommender.store.database import SlateStore
from slate_recommender.store.models import (
    Content,
    ContentFeature,
    Event,
    EventType,
    ThemeItem,
    UserDomainStat,
)


# Fixed reference time for flag computations
NOW = datetime(2026, 3, 15, 12, 0, 0)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture(autouse=True)
def uncached_logging(monkeypatch):
    """
    Keep structlog from caching loggers bound to a captured stream.

    The CLI reconfigures logging on every run; that is disabled here too.
    """
    monkeypatch.setattr("slate_recommender.cli.recommend.setup_logging", lambda **kwargs: None)
    structlog.configure(cache_logger_on_first_use=False)


@pytest.fixture
def store() -> SlateStore:
    """
    In-memory SQLite store with all tables created.

    Yields:
        SlateStore instance
    """
    store = SlateStore.from_url("sqlite://")
    store.create_all_tables()
    yield store
    store.drop_all_tables()
    store.dispose()


class Seeder:
    """Insert saved items and interaction data for a user."""

    def __init__(self, store: SlateStore):
        self.store = store

    def content(
        self,
        user_id: str,
        content_id: Optional[str] = None,
        domain: Optional[str] = "example.com",
        saved_at: datetime = NOW,
        reading_bucket: Optional[str] = None,
        themes: Iterable[str] = (),
        opens: int = 0,
    ) -> str:
        content_id = content_id or str(uuid.uuid4())
        with self.store.session() as session:
            session.add(
                Content(
                    id=content_id,
                    user_id=user_id,
                    url=f"https://{domain or 'unknown'}/{content_id}",
                    title=f"Item {content_id}",
                    domain=domain,
                    saved_at=saved_at,
                )
            )
            if reading_bucket is not None:
                session.add(ContentFeature(content_id=content_id, reading_bucket=reading_bucket))
            for theme_id in themes:
                session.add(ThemeItem(content_id=content_id, theme_id=theme_id))
            for _ in range(opens):
                session.add(
                    Event(
                        id=str(uuid.uuid4()),
                        user_id=user_id,
                        content_id=content_id,
                        type=EventType.OPEN,
                    )
                )
        return content_id

    def event(self, user_id: str, content_id: str, event_type: str) -> None:
        with self.store.session() as session:
            session.add(
                Event(
                    id=str(uuid.uuid4()),
                    user_id=user_id,
                    content_id=content_id,
                    type=event_type,
                )
            )

    def domain_stat(self, user_id: str, domain: str, save_count: int) -> None:
        with self.store.session() as session:
            session.add(UserDomainStat(user_id=user_id, domain=domain, save_count=save_count))


@pytest.fixture
def seed(store: SlateStore) -> Seeder:
    return Seeder(store)


def build_scored(
    content_id: str,
    score: int,
    domain: str = "example.com",
    reading_bucket: Optional[ReadingBucket] = None,
    themes: Iterable[str] = (),
    saved_at: datetime = NOW,
    reasons: Optional[List[str]] = None,
) -> Scored:
    return Scored(
        id=content_id,
        domain=domain,
        saved_at=saved_at,
        reading_bucket=reading_bucket,
        theme_ids=tuple(themes),
        score=score,
        reasons=reasons or [],
    )


@pytest.fixture
def make_scored() -> Callable[..., Scored]:
    """Factory for Scored candidates."""
    return build_scored


@pytest.fixture
def weights() -> ScoringWeights:
    """Weight table with distinct values per signal."""
    return ScoringWeights(
        version=7,
        never_opened=2.0,
        fresh_forgotten=3.0,
        time_fit=1.0,
        frequent_source=1.0,
        bridge=1.0,
        duplicate_penalty=-2.0,
        same_domain_penalty=-1.0,
    )


@pytest.fixture
def days_ago(now: datetime) -> Callable[[float], datetime]:
    return lambda days: now - timedelta(days=days)
