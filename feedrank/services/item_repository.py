# feedrank/services/item_repository.py
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from feedrank.db import SessionLocal
from feedrank.models import ItemRow, ItemTag
from feedrank.normalizer import normalize_row
from feedrank.schemas import FeedFilters, Item, PageOrder

class SqlItemRepository:
    supports_tag_filter = True

    def __init__(self, sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None):
        self.sessionmaker = sessionmaker or SessionLocal

    def _query(self, filters: FeedFilters, order: PageOrder):
        q = select(ItemRow)
        if filters.owner_id:
            q = q.where(ItemRow.owner_id == filters.owner_id)
        if filters.item_type:
            q = q.where(ItemRow.item_type == filters.item_type)
        if filters.search:
            pattern = f"%{filters.search}%"
            q = q.where(or_(ItemRow.title.ilike(pattern), ItemRow.description.ilike(pattern)))
        if filters.tag_id:
            tagged = select(ItemTag.item_id).where(ItemTag.tag_id == filters.tag_id)
            q = q.where(ItemRow.id.in_(tagged))

        if order == PageOrder.POPULAR:
            q = q.order_by(func.coalesce(ItemRow.hot_score, 0).desc(), ItemRow.created_at.desc().nulls_last(), ItemRow.id)
        else:
            q = q.order_by(ItemRow.created_at.desc().nulls_last(), ItemRow.id)
        return q

    async def fetch_page(
        self,
        filters: FeedFilters,
        limit: int,
        offset: int,
        order: PageOrder = PageOrder.NEWEST,
    ) -> List[Item]:
        q = self._query(filters, order).offset(offset).limit(limit)
        async with self.sessionmaker() as s:
            rows = (await s.execute(q)).scalars().all()
            return [normalize_row(r) for r in rows]
