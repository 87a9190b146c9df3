# feedrank/engine.py
"""
Feed ranking orchestrator.

Fetches a page of items and, for personalised ``algorithm`` requests, the
viewer's history for exactly those items, then classifies and assembles the
final order. Upstream failures degrade to an empty page or an empty seen-set;
``compute`` never raises because of them.
"""
import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, List, Optional, Set

from feedrank.assembler import assemble
from feedrank.config import Settings, settings as default_settings
from feedrank.schemas import FeedRequest, Item, PageOrder, RankedResult, SortMode, ViewerContext
from feedrank.segments import classify
from feedrank.services.contracts import ItemRepository, ViewHistoryStore
from feedrank.utils.timeutil import as_utc, utcnow

logger = logging.getLogger(__name__)

def _failed(result: Any) -> bool:
    if isinstance(result, asyncio.CancelledError):
        raise result
    return isinstance(result, Exception)

class FeedRankingEngine:
    def __init__(
        self,
        item_repository: ItemRepository,
        view_history_store: Optional[ViewHistoryStore] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.item_repository = item_repository
        self.view_history_store = view_history_store
        self.settings = settings or default_settings
        self.clock = clock

    async def _fetch_page(self, request: FeedRequest, limit: int, order: PageOrder) -> List[Item]:
        return await self.item_repository.fetch_page(request.filters, limit, request.offset, order)

    async def _viewed_ids(self, viewer_id: str, page_task: "asyncio.Task[List[Item]]") -> Set[int]:
        # a failed page surfaces through the page branch of the gather
        page = await page_task
        if not page:
            return set()
        return await self.view_history_store.get_viewed_ids(viewer_id, {i.id for i in page})

    async def compute(
        self,
        request: FeedRequest,
        viewer: Optional[ViewerContext] = None,
        now: Optional[datetime] = None,
    ) -> RankedResult:
        sort_mode = SortMode.parse(request.sort_mode)
        limit = min(request.limit, self.settings.FEED_MAX_LIMIT)
        viewer = viewer or ViewerContext.anonymous()
        evaluated_at = as_utc(now) if now is not None else self.clock()
        order = PageOrder.POPULAR if sort_mode == SortMode.POPULAR else PageOrder.NEWEST

        page_task = asyncio.ensure_future(self._fetch_page(request, limit, order))
        wants_history = (
            sort_mode == SortMode.ALGORITHM
            and not viewer.is_anonymous
            and self.view_history_store is not None
        )
        if wants_history:
            page, seen = await asyncio.gather(
                page_task, self._viewed_ids(viewer.viewer_id, page_task), return_exceptions=True
            )
        else:
            page, seen = (await asyncio.gather(page_task, return_exceptions=True))[0], set()

        if _failed(page):
            logger.warning(f"Item fetch failed, serving empty feed: {page!r}", exc_info=page)
            return RankedResult(items=[], sort_mode=sort_mode, evaluated_at=evaluated_at, degraded=True)

        degraded = False
        if seen is None:
            seen = ValueError("view history store returned None")
        if _failed(seen):
            logger.warning(f"View history fetch failed for viewer {viewer.viewer_id}, ranking unweighted: {seen!r}", exc_info=seen)
            seen, degraded = set(), True

        page = list(page or [])[:limit]
        page_ids = {i.id for i in page}
        viewer = viewer.with_viewed((set(viewer.viewed_item_ids) | set(seen)) & page_ids)

        if sort_mode == SortMode.ALGORITHM:
            segs = classify(page, evaluated_at, recent_window=self.settings.recent_window)
            ranked = assemble(
                segs.pinned,
                segs.recent,
                segs.standard,
                viewer,
                sort_mode,
                recent_cap=self.settings.RECENT_CAP,
                seen_weight=self.settings.SEEN_WEIGHT,
                unseen_weight=self.settings.UNSEEN_WEIGHT,
            )
        else:
            ranked = assemble(page, [], [], viewer, sort_mode)

        tag_id = request.filters.tag_id
        if tag_id and not getattr(self.item_repository, "supports_tag_filter", False):
            before = len(ranked)
            ranked = [i for i in ranked if tag_id in i.tag_ids]
            # filtering after paging can leave fewer than `limit` items
            logger.debug(f"Tag filter {tag_id} applied after ranking: {before} -> {len(ranked)} items")

        logger.debug(
            f"Ranked {len(ranked)} items (mode={sort_mode.value}, viewer={viewer.viewer_id}, "
            f"seen={len(viewer.viewed_item_ids)}, degraded={degraded})"
        )
        return RankedResult(items=ranked, sort_mode=sort_mode, evaluated_at=evaluated_at, degraded=degraded)

async def compute_feed(
    request: FeedRequest,
    item_repository: ItemRepository,
    view_history_store: Optional[ViewHistoryStore] = None,
    viewer: Optional[ViewerContext] = None,
    now: Optional[datetime] = None,
) -> RankedResult:
    engine = FeedRankingEngine(item_repository, view_history_store)
    return await engine.compute(request, viewer=viewer, now=now)
