# feedrank/normalizer.py
import logging
from typing import Any, Iterable, Mapping, Optional

from feedrank.models import ItemRow
from feedrank.schemas import Item

logger = logging.getLogger(__name__)

def _tag_ids(tags: Optional[Iterable[Any]]) -> list[str]:
    out = []
    for t in tags or ():
        if isinstance(t, Mapping):
            t = t.get("tag_id", t.get("id"))
        elif hasattr(t, "tag_id"):
            t = t.tag_id
        if t is not None:
            out.append(str(t))
    return out

def normalize_record(raw: Mapping[str, Any]) -> Item:
    """
    Build an Item from a loosely shaped record.

    Accepts both ``hot_score`` and ``popularity_score``, and tags given as
    ids, ``{"id": ...}`` dicts or ``{"tag_id": ...}`` dicts. A missing score
    becomes 0 and a missing or unreadable creation time becomes None.
    """
    score = raw.get("popularity_score", raw.get("hot_score"))
    created_at = raw.get("created_at", raw.get("createdAt"))
    if score is None or created_at is None:
        logger.debug(f"Item {raw.get('id')} is missing score or created_at; using defaults")

    return Item(
        id=raw["id"],
        created_at=created_at,
        popularity_score=score,
        # pydantic reads "false" / "0" as False; bool() would not
        is_pinned=raw.get("is_pinned", raw.get("isPinned", False)),
        tag_ids=_tag_ids(raw.get("tag_ids") or raw.get("tags")),
        owner_id=raw.get("owner_id", raw.get("user_id")),
        item_type=raw.get("item_type", raw.get("post_type")),
        title=raw.get("title"),
    )

def normalize_row(row: ItemRow) -> Item:
    return Item(
        id=row.id,
        created_at=row.created_at,
        popularity_score=row.hot_score,
        is_pinned=bool(row.is_pinned),
        tag_ids=_tag_ids(row.tags),
        owner_id=row.owner_id,
        item_type=row.item_type,
        title=row.title,
    )
