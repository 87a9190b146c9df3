# feedrank/services/view_history.py
import logging
from typing import AbstractSet, Optional, Set

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from feedrank.db import SessionLocal
from feedrank.models import ItemView

logger = logging.getLogger(__name__)

class SqlViewHistoryStore:
    def __init__(self, sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None):
        self.sessionmaker = sessionmaker or SessionLocal

    async def get_viewed_ids(self, viewer_id: str, item_ids: AbstractSet[int]) -> Set[int]:
        if not item_ids:
            return set()
        q = select(ItemView.item_id).where(
            ItemView.viewer_id == viewer_id,
            ItemView.item_id.in_(list(item_ids)),
        )
        async with self.sessionmaker() as s:
            return set((await s.execute(q)).scalars().all())

    async def record_view(self, viewer_id: str, item_id: int) -> bool:
        """Store a view once per viewer and item. Returns False if it was already there."""
        async with self.sessionmaker() as s:
            existing = (
                await s.execute(
                    select(ItemView.id).where(ItemView.viewer_id == viewer_id, ItemView.item_id == item_id)
                )
            ).scalar_one_or_none()
            if existing is not None:
                return False
            s.add(ItemView(viewer_id=viewer_id, item_id=item_id))
            try:
                await s.commit()
            except IntegrityError:
                # a concurrent request recorded the same view first
                await s.rollback()
                logger.debug(f"View {viewer_id}/{item_id} already recorded")
                return False
        return True
