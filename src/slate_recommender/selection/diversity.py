"""
Diversity-constrained slate selection.

Greedy fill followed by targeted repair swaps:

1. Sort by score descending.
2. Strict pass: one item per domain (unless allowed), no near-duplicates.
3. Relaxed pass: fill remaining slots ignoring the domain guard, still no near-duplicates.
4. Reading-length repair: make sure a SHORT item is present when the pool has one.
5. Topic repair: swap in items from uncovered themes until ``min_distinct_themes`` is reached.

The result is a local heuristic, not a globally optimal slate. Its order is the
final presentation order.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Set, Tuple

import structlog

from slate_recommender.models.recommendation import ReadingBucket, Scored


logger = structlog.get_logger(__name__)


# (id, id) -> True when the two items are too similar to show together
NearDuplicatePredicate = Callable[[str, str], bool]


@dataclass(frozen=True)
class DiversityOptions:
    """Selection guards."""
    allow_same_domain: bool = False
    require_short_if_available: bool = True
    min_distinct_themes: int = 2
    near_duplicate: Optional[NearDuplicatePredicate] = None


def _is_near_duplicate(
    item: Scored, selected: List[Scored], near_duplicate: Optional[NearDuplicatePredicate]
) -> bool:
    if near_duplicate is None:
        return False
    return any(near_duplicate(s.id, item.id) or near_duplicate(item.id, s.id) for s in selected)


def _conflicts_after_swap(
    incoming: Scored,
    selected: List[Scored],
    replace_idx: int,
    near_duplicate: Optional[NearDuplicatePredicate],
) -> bool:
    """True if ``incoming`` would be a near-duplicate of a selected item it does not replace."""
    others = [s for i, s in enumerate(selected) if i != replace_idx]
    return _is_near_duplicate(incoming, others, near_duplicate)


def select_diverse(
    scored: List[Scored],
    k: int,
    options: Optional[DiversityOptions] = None,
) -> List[Scored]:
    """
    Select up to ``k`` items under domain, duplicate, reading-length and theme guards.

    Args:
        scored: Scored candidates (any order; re-sorted by score here)
        k: Maximum slate size
        options: Selection guards (default: DiversityOptions())

    Returns:
        Selected items in presentation order, at most ``k`` and never padded

    Examples:
        >>> picked = select_diverse(pool, k=3)
        >>> [s.id for s in picked]
        ['A', 'B', 'C']
    """
    if k <= 0 or not scored:
        return []

    options = options or DiversityOptions()
    near_dup = options.near_duplicate

    # Stable sort: equal scores keep their incoming relative order
    items = sorted(scored, key=lambda s: s.score, reverse=True)

    selected: List[Scored] = []
    selected_ids: Set[str] = set()
    seen_domains: Set[str] = set()

    # Pass 1: domain guard + near-duplicates
    for item in items:
        if len(selected) >= k:
            break
        if item.id in selected_ids:
            continue
        if not options.allow_same_domain and item.domain and item.domain in seen_domains:
            continue
        if _is_near_duplicate(item, selected, near_dup):
            continue

        selected.append(item)
        selected_ids.add(item.id)
        if item.domain:
            seen_domains.add(item.domain)

    strict_count = len(selected)

    # Pass 2: fill remaining slots ignoring the domain guard
    if len(selected) < k:
        for item in items:
            if len(selected) >= k:
                break
            if item.id in selected_ids:
                continue
            if _is_near_duplicate(item, selected, near_dup):
                continue

            selected.append(item)
            selected_ids.add(item.id)

    short_swapped = False
    if options.require_short_if_available:
        short_swapped = _repair_reading_mix(items, selected, selected_ids, near_dup)

    theme_swaps = _repair_theme_coverage(
        items,
        selected,
        selected_ids,
        options.min_distinct_themes,
        near_dup,
        protect_short=options.require_short_if_available,
    )

    logger.debug(
        "diversity_applied",
        pool_size=len(items),
        k=k,
        strict_count=strict_count,
        selected_count=len(selected),
        short_swapped=short_swapped,
        theme_swaps=theme_swaps,
    )

    return selected[:k]


def _swap_out_order(
    selected: List[Scored],
    eligible: Callable[[Scored], bool],
    protect_short: bool,
) -> List[int]:
    """Indices of eligible items, lowest score first; later positions first on ties."""
    short_count = sum(1 for s in selected if s.reading_bucket == ReadingBucket.SHORT)
    indices = [
        idx
        for idx in range(len(selected) - 1, -1, -1)
        if eligible(selected[idx])
        and not (
            protect_short
            and short_count == 1
            and selected[idx].reading_bucket == ReadingBucket.SHORT
        )
    ]
    # Equal scores keep later positions first
    return sorted(indices, key=lambda idx: selected[idx].score)


def _repair_reading_mix(
    items: List[Scored],
    selected: List[Scored],
    selected_ids: Set[str],
    near_dup: Optional[NearDuplicatePredicate],
) -> bool:
    """
    Swap the best unselected SHORT item in for the lowest-placed non-SHORT one.

    Returns:
        True if a swap happened
    """
    if not selected:
        return False
    if not any(i.reading_bucket == ReadingBucket.SHORT for i in items):
        return False
    if any(s.reading_bucket == ReadingBucket.SHORT for s in selected):
        return False

    replace_idx = next(
        (
            i
            for i in range(len(selected) - 1, -1, -1)
            if selected[i].reading_bucket != ReadingBucket.SHORT
        ),
        -1,
    )
    if replace_idx == -1:
        return False

    best_short = next(
        (
            i
            for i in items
            if i.reading_bucket == ReadingBucket.SHORT
            and i.id not in selected_ids
            and not _conflicts_after_swap(i, selected, replace_idx, near_dup)
        ),
        None,
    )
    if best_short is None:
        return False

    selected_ids.discard(selected[replace_idx].id)
    selected[replace_idx] = best_short
    selected_ids.add(best_short.id)
    return True


def _repair_theme_coverage(
    items: List[Scored],
    selected: List[Scored],
    selected_ids: Set[str],
    min_distinct_themes: int,
    near_dup: Optional[NearDuplicatePredicate],
    protect_short: bool = False,
) -> int:
    """
    Swap in items carrying uncovered themes until coverage reaches the target.

    Missing themes are visited in pool order. For each one the selected items
    that do not already cover it are tried lowest score first (ties: the later
    position); the first swap that grows distinct coverage is taken. With
    ``protect_short`` the only selected SHORT item is never swapped out.

    Returns:
        Number of swaps performed
    """
    if not selected:
        return 0

    covered: Set[str] = {t for s in selected for t in s.theme_ids}
    if len(covered) >= min_distinct_themes:
        return 0

    pool_themes: List[str] = []
    for item in items:
        for theme in item.theme_ids:
            if theme not in pool_themes:
                pool_themes.append(theme)
    if not pool_themes:
        return 0

    swaps = 0
    for theme in pool_themes:
        if len(covered) >= min_distinct_themes:
            break
        if theme in covered:
            continue

        swap = _find_theme_swap(
            theme, items, selected, selected_ids, covered, near_dup, protect_short
        )
        if swap is None:
            continue

        replace_idx, incoming, after_covered = swap
        selected_ids.discard(selected[replace_idx].id)
        selected[replace_idx] = incoming
        selected_ids.add(incoming.id)
        covered = after_covered
        swaps += 1

    return swaps


def _find_theme_swap(
    theme: str,
    items: List[Scored],
    selected: List[Scored],
    selected_ids: Set[str],
    covered: Set[str],
    near_dup: Optional[NearDuplicatePredicate],
    protect_short: bool,
) -> Optional[Tuple[int, Scored, Set[str]]]:
    """First (index, incoming item, coverage after) that adds ``theme`` and grows coverage."""
    for replace_idx in _swap_out_order(
        selected, lambda s: theme not in s.theme_ids, protect_short
    ):
        incoming = next(
            (
                i
                for i in items
                if theme in i.theme_ids
                and i.id not in selected_ids
                and not _conflicts_after_swap(i, selected, replace_idx, near_dup)
            ),
            None,
        )
        if incoming is None:
            continue

        # The outgoing item may carry other themes
        after = [incoming if i == replace_idx else s for i, s in enumerate(selected)]
        after_covered = {t for s in after for t in s.theme_ids}
        if len(after_covered) > len(covered):
            return replace_idx, incoming, after_covered

    return None


class DiversitySelector:
    """Selector bound to a fixed set of options."""

    def __init__(self, options: Optional[DiversityOptions] = None):
        self.options = options or DiversityOptions()

    def select(self, scored: List[Scored], k: int) -> List[Scored]:
        return select_diverse(scored, k, self.options)
