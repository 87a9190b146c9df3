# feedrank/schemas.py
import math
from datetime import datetime
from enum import Enum
from typing import Any, FrozenSet, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from feedrank.config import settings
from feedrank.utils.timeutil import parse_timestamp

class SortMode(str, Enum):
    ALGORITHM = "algorithm"
    LATEST = "latest"
    POPULAR = "popular"

    @classmethod
    def parse(cls, value: Any) -> "SortMode":
        """Unknown, empty or missing values fall back to ALGORITHM."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return cls.ALGORITHM
        return cls.ALGORITHM

class PageOrder(str, Enum):
    """Orderings an item store can apply natively when paging."""
    NEWEST = "newest"
    POPULAR = "popular"

class Item(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    created_at: Optional[datetime] = None
    popularity_score: float = 0.0
    is_pinned: bool = False
    tag_ids: FrozenSet[str] = frozenset()

    owner_id: Optional[str] = None
    item_type: Optional[str] = None
    title: Optional[str] = None

    @field_validator("created_at", mode="before")
    @classmethod
    def _coerce_created_at(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)

    @field_validator("popularity_score", mode="before")
    @classmethod
    def _coerce_score(cls, v: Any) -> float:
        if v is None or isinstance(v, bool):
            return 0.0
        try:
            score = float(v)
        except (TypeError, ValueError):
            return 0.0
        if math.isnan(score) or score < 0:
            return 0.0
        return score

    @field_validator("is_pinned", mode="before")
    @classmethod
    def _coerce_pinned(cls, v: Any) -> Any:
        return False if v is None else v

    @field_validator("tag_ids", mode="before")
    @classmethod
    def _coerce_tags(cls, v: Any) -> FrozenSet[str]:
        if not v:
            return frozenset()
        if isinstance(v, str):
            return frozenset([v])
        return frozenset(str(t) for t in v if t is not None)

    @field_validator("owner_id", mode="before")
    @classmethod
    def _coerce_owner(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

class ViewerContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    viewer_id: Optional[str] = None
    viewed_item_ids: FrozenSet[int] = frozenset()

    @field_validator("viewer_id", mode="before")
    @classmethod
    def _coerce_viewer_id(cls, v: Any) -> Optional[str]:
        if v is None or v == "":
            return None
        return str(v)

    @classmethod
    def anonymous(cls) -> "ViewerContext":
        return cls()

    @property
    def is_anonymous(self) -> bool:
        return self.viewer_id is None

    def has_seen(self, item_id: int) -> bool:
        if self.is_anonymous:
            return False
        return item_id in self.viewed_item_ids

    def with_viewed(self, item_ids: Iterable[int]) -> "ViewerContext":
        return self.model_copy(update={"viewed_item_ids": frozenset(item_ids)})

class FeedFilters(BaseModel):
    model_config = ConfigDict(frozen=True)

    tag_id: Optional[str] = None
    owner_id: Optional[str] = None
    item_type: Optional[str] = None
    search: Optional[str] = None

class FeedRequest(BaseModel):
    filters: FeedFilters = Field(default_factory=FeedFilters)
    limit: int = Field(default_factory=lambda: settings.FEED_DEFAULT_LIMIT, gt=0)
    offset: int = Field(default=0, ge=0)
    sort_mode: SortMode = SortMode.ALGORITHM

    @field_validator("sort_mode", mode="before")
    @classmethod
    def _coerce_sort_mode(cls, v: Any) -> SortMode:
        return SortMode.parse(v)

class RankedResult(BaseModel):
    items: List[Item] = Field(default_factory=list)
    sort_mode: SortMode = SortMode.ALGORITHM
    evaluated_at: Optional[datetime] = None
    # set when an upstream read failed and an empty substitute was used
    degraded: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.items

    def ids(self) -> List[int]:
        return [i.id for i in self.items]
