# feedrank/assembler.py
from typing import Dict, List, Optional, Sequence, Tuple

from feedrank.config import settings
from feedrank.schemas import Item, SortMode, ViewerContext
from feedrank.scoring import adjusted_score

def recency(item: Item) -> float:
    # items without a creation time are the oldest possible
    if item.created_at is None:
        return float("-inf")
    return item.created_at.timestamp()

def latest_key(item: Item) -> Tuple[float, int]:
    return (-recency(item), item.id)

def popular_key(item: Item) -> Tuple[float, float, int]:
    return (-item.popularity_score, -recency(item), item.id)

def scored_key(scores: Dict[int, float]):
    def key(item: Item) -> Tuple[float, float, int]:
        return (-scores[item.id], -recency(item), item.id)
    return key

def assemble(
    pinned: Sequence[Item],
    recent: Sequence[Item],
    standard: Sequence[Item],
    viewer: Optional[ViewerContext],
    sort_mode: SortMode,
    recent_cap: Optional[int] = None,
    seen_weight: Optional[float] = None,
    unseen_weight: Optional[float] = None,
) -> List[Item]:
    """
    Merge the three segments into the final feed order.

    ``latest`` and ``popular`` ignore the segmentation and sort everything.
    ``algorithm`` returns pinned (as given), then up to ``recent_cap`` of the
    newest recent items, then everything else by exposure-adjusted score.
    ``recent`` must already be newest-first, as the classifier returns it.
    """
    if sort_mode == SortMode.LATEST:
        return sorted([*pinned, *recent, *standard], key=latest_key)
    if sort_mode == SortMode.POPULAR:
        return sorted([*pinned, *recent, *standard], key=popular_key)

    cap = settings.RECENT_CAP if recent_cap is None else max(0, recent_cap)
    top_recent = list(recent[:cap])
    overflow = list(recent[cap:])

    pool = overflow + list(standard)
    scores = {item.id: adjusted_score(item, viewer, seen_weight, unseen_weight) for item in pool}
    pool.sort(key=scored_key(scores))

    return [*pinned, *top_recent, *pool]
