"""
Slate persistence.

Writes the slate row, its ranked items and one impression event per item in a
single transaction. A transient failure re-runs the whole write once, from
scratch and without delay (new slate id); a second failure is re-raised as is.
"""

from typing import Any, Callable, Dict, List, Optional, TypeVar

import structlog

from slate_recommender.errors import TransientStoreError
from slate_recommender.models.recommendation import Scored
from slate_recommender.models.slate import SlateItemResult, SlateResult
from slate_recommender.store.database import SlateStore
from slate_recommender.store.queries import (
    create_impression_events,
    create_slate,
    create_slate_items,
)


logger = structlog.get_logger(__name__)

T = TypeVar("T")

MAX_ATTEMPTS = 2
EMPTY_SLATE_META: Dict[str, Any] = {"empty": True}


class SlatePersistor:
    """
    Transactional slate writer with a single immediate retry on transient failure.
    """

    def __init__(self, store: SlateStore):
        self.store = store
        self.logger = logger.bind(component="slate_persistor")

    def persist(self, user_id: str, selection: List[Scored], meta: Dict[str, Any]) -> SlateResult:
        """
        Persist a slate with its items and impression events.

        Args:
            user_id: Slate owner
            selection: Selected items in presentation order
            meta: Opaque slate metadata (weights version, context snapshot)

        Returns:
            SlateResult with the new slate id and items in presentation order

        Raises:
            TransientStoreError: Second transient failure (after one retry)
            FatalStoreError: Non-transient store failure (not retried)
        """
        return self._with_single_retry(
            "persist_slate", lambda: self._write(user_id, selection, meta), user_id=user_id
        )

    def persist_empty(self, user_id: str) -> SlateResult:
        """
        Persist an item-less slate for analytics when the candidate pool is empty.

        Follows the same retry rule as ``persist``.
        """
        return self._with_single_retry(
            "persist_empty_slate",
            lambda: self._write(user_id, [], dict(EMPTY_SLATE_META)),
            user_id=user_id,
        )

    def _write(self, user_id: str, selection: List[Scored], meta: Dict[str, Any]) -> SlateResult:
        with self.store.session() as session:
            slate = create_slate(session, user_id, meta)

            rows = [
                {
                    "slate_id": slate.id,
                    "position": position,
                    "content_id": item.id,
                    "score": item.score,
                    "reasons": list(item.reasons),
                }
                for position, item in enumerate(selection, start=1)
            ]
            create_slate_items(session, rows)

            create_impression_events(
                session,
                user_id=user_id,
                slate_id=slate.id,
                impressions=[
                    {"content_id": item.id, "reasons": item.reasons} for item in selection
                ],
            )

            slate_id = slate.id

        self.logger.info(
            "slate_persisted",
            user_id=user_id,
            slate_id=slate_id,
            items_count=len(selection),
        )

        return SlateResult(
            slate_id=slate_id,
            items=[
                SlateItemResult(content_id=item.id, score=item.score, reasons=list(item.reasons))
                for item in selection
            ],
        )

    def _with_single_retry(self, operation: str, func: Callable[[], T], **log_context) -> T:
        """
        Run ``func``; on TransientStoreError run it exactly once more.

        Raises:
            The second failure, unmodified
        """
        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                return func()
            except TransientStoreError as e:
                if attempt == MAX_ATTEMPTS:
                    self.logger.error(
                        "persist_failed_after_retry",
                        operation=operation,
                        attempts=attempt,
                        error=str(e),
                        **log_context,
                    )
                    raise

                self.logger.warning(
                    "persist_retry",
                    operation=operation,
                    attempt=attempt,
                    error=str(e),
                    **log_context,
                )

        # Unreachable: the loop either returns or raises
        raise RuntimeError(f"{operation} exhausted attempts without a result")


def persist_slate(
    store: SlateStore,
    user_id: str,
    selection: List[Scored],
    meta: Optional[Dict[str, Any]] = None,
) -> SlateResult:
    """Persist using a one-off persistor for the given store."""
    return SlatePersistor(store).persist(user_id, selection, meta or {})
