# feedrank/services/record_repository.py
import logging
from typing import Any, Awaitable, Callable, List, Mapping, Sequence

from pydantic import ValidationError

from feedrank.normalizer import normalize_record
from feedrank.schemas import FeedFilters, Item, PageOrder

logger = logging.getLogger(__name__)

FetchRecords = Callable[[FeedFilters, int, int, PageOrder], Awaitable[Sequence[Mapping[str, Any]]]]

class RecordItemRepository:
    """
    Item source backed by any client that returns loose dict records,
    e.g. a hosted backend's query API. Records are normalized here so the
    ranking code only ever sees well-formed Items.
    """

    def __init__(self, fetch_records: FetchRecords, supports_tag_filter: bool = False):
        self.fetch_records = fetch_records
        self.supports_tag_filter = supports_tag_filter

    async def fetch_page(
        self,
        filters: FeedFilters,
        limit: int,
        offset: int,
        order: PageOrder = PageOrder.NEWEST,
    ) -> List[Item]:
        records = await self.fetch_records(filters, limit, offset, order)
        items = []
        for raw in records or ():
            try:
                items.append(normalize_record(raw))
            except (KeyError, ValidationError) as e:
                logger.warning(f"Skipping malformed item record {raw.get('id')!r}: {e}")
        return items
