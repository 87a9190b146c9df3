# feedrank/segments.py
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional

from feedrank.config import settings
from feedrank.schemas import Item
from feedrank.utils.timeutil import as_utc

@dataclass
class Segments:
    pinned: List[Item] = field(default_factory=list)
    recent: List[Item] = field(default_factory=list)
    standard: List[Item] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.pinned) + len(self.recent) + len(self.standard)

def is_pinned(item: Item) -> bool:
    return item.is_pinned

def classify(
    items: Iterable[Item],
    now: datetime,
    pinned_predicate: Callable[[Item], bool] = is_pinned,
    recent_window: Optional[timedelta] = None,
) -> Segments:
    """
    Split a batch into pinned / recent / standard.

    Recent is every non-pinned item created at or after ``now - recent_window``,
    newest first. Items without a creation time are never recent. Pinned and
    standard keep the order they were supplied in.
    """
    window = settings.recent_window if recent_window is None else recent_window
    cutoff = as_utc(now) - window

    segs = Segments()
    for item in items:
        if pinned_predicate(item):
            segs.pinned.append(item)
        elif item.created_at is not None and item.created_at >= cutoff:
            segs.recent.append(item)
        else:
            segs.standard.append(item)

    segs.recent.sort(key=lambda i: (-i.created_at.timestamp(), i.id))
    return segs
