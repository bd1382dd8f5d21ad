"""
Read and write helpers over an open session.

These implement the data store contracts used by the pipeline:
- list a user's saved items (newest first, with features and themes)
- count OPEN events for a (user, content) pair
- list a user's domains by save count
- create a slate, batch-create its items, create impression events
"""

import uuid
from typing import Any, Dict, Iterable, List, Sequence

from sqlalchemy import func, insert, select
from sqlalchemy.orm import Session, selectinload

from .models import Content, Event, EventType, Slate, SlateItem, UserDomainStat


# ============================================================================
# READS
# ============================================================================

def list_saved_items(session: Session, user_id: str, limit: int) -> List[Content]:
    """
    List a user's saved items ordered by save time descending.

    Features and theme associations are loaded eagerly so they stay readable
    after the session closes.
    """
    stmt = (
        select(Content)
        .where(Content.user_id == user_id)
        .order_by(Content.saved_at.desc())
        .limit(limit)
        .options(selectinload(Content.features), selectinload(Content.theme_items))
    )
    return list(session.scalars(stmt).all())


def count_open_events(session: Session, user_id: str, content_id: str) -> int:
    """Count OPEN interaction events for a (user, content) pair."""
    stmt = (
        select(func.count())
        .select_from(Event)
        .where(
            Event.user_id == user_id,
            Event.content_id == content_id,
            Event.type == EventType.OPEN,
        )
    )
    return int(session.scalar(stmt) or 0)


def list_domain_stats(session: Session, user_id: str, limit: int) -> List[UserDomainStat]:
    """List a user's domains ordered by save count descending."""
    stmt = (
        select(UserDomainStat)
        .where(UserDomainStat.user_id == user_id)
        .order_by(UserDomainStat.save_count.desc())
        .limit(limit)
    )
    return list(session.scalars(stmt).all())


# ============================================================================
# WRITES
# ============================================================================

def create_slate(session: Session, user_id: str, meta: Dict[str, Any]) -> Slate:
    """Create a slate row and flush it so its id is usable in the same transaction."""
    slate = Slate(id=str(uuid.uuid4()), user_id=user_id, meta=meta)
    session.add(slate)
    session.flush()
    return slate


def create_slate_items(session: Session, rows: Sequence[Dict[str, Any]]) -> int:
    """
    Batch-create slate items.

    Each row holds slate_id, position, content_id, score and reasons.
    """
    if not rows:
        return 0
    session.execute(insert(SlateItem), list(rows))
    return len(rows)


def create_impression_events(
    session: Session,
    user_id: str,
    slate_id: str,
    impressions: Iterable[Dict[str, Any]],
) -> int:
    """
    Create one IMPRESSION event per shown item.

    Each impression holds content_id and the reasons that justified it.
    """
    count = 0
    for impression in impressions:
        session.add(
            Event(
                id=str(uuid.uuid4()),
                user_id=user_id,
                content_id=impression["content_id"],
                slate_id=slate_id,
                type=EventType.IMPRESSION,
                context={"reasons": list(impression.get("reasons", []))},
            )
        )
        count += 1
    session.flush()
    return count
