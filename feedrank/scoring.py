# feedrank/scoring.py
from typing import Optional

from feedrank.config import settings
from feedrank.schemas import Item, ViewerContext

def exposure_weight(
    item: Item,
    viewer: Optional[ViewerContext],
    seen_weight: Optional[float] = None,
    unseen_weight: Optional[float] = None,
) -> float:
    seen = settings.SEEN_WEIGHT if seen_weight is None else seen_weight
    unseen = settings.UNSEEN_WEIGHT if unseen_weight is None else unseen_weight
    if viewer is not None and viewer.has_seen(item.id):
        return seen
    return unseen

def adjusted_score(
    item: Item,
    viewer: Optional[ViewerContext],
    seen_weight: Optional[float] = None,
    unseen_weight: Optional[float] = None,
) -> float:
    return item.popularity_score * exposure_weight(item, viewer, seen_weight, unseen_weight)
