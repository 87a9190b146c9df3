# feedrank/services/contracts.py
from typing import AbstractSet, List, Protocol, Set, runtime_checkable

from feedrank.schemas import FeedFilters, Item, PageOrder

@runtime_checkable
class ItemRepository(Protocol):
    # False means tag_id filters are ignored by fetch_page and the engine
    # filters the ranked page itself
    supports_tag_filter: bool

    async def fetch_page(
        self,
        filters: FeedFilters,
        limit: int,
        offset: int,
        order: PageOrder = PageOrder.NEWEST,
    ) -> List[Item]:
        ...

@runtime_checkable
class ViewHistoryStore(Protocol):
    async def get_viewed_ids(self, viewer_id: str, item_ids: AbstractSet[int]) -> Set[int]:
        """Ids from ``item_ids`` the viewer has already seen."""
        ...
