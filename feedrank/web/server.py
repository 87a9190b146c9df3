# feedrank/web/server.py
from typing import Optional

from fastapi import FastAPI, HTTPException, Query

from feedrank.config import settings
from feedrank.engine import FeedRankingEngine
from feedrank.schemas import FeedFilters, FeedRequest, SortMode, ViewerContext
from feedrank.services.contracts import ItemRepository, ViewHistoryStore
from feedrank.services.item_repository import SqlItemRepository
from feedrank.services.view_history import SqlViewHistoryStore

def create_app(
    item_repository: Optional[ItemRepository] = None,
    view_history_store: Optional[ViewHistoryStore] = None,
) -> FastAPI:
    app = FastAPI(title="feedrank")
    items = item_repository or SqlItemRepository()
    history = view_history_store or SqlViewHistoryStore()
    engine = FeedRankingEngine(items, history)

    @app.get("/healthz")
    async def healthz():
        return {"ok": True}

    @app.get("/feed")
    async def feed(
        tag_id: Optional[str] = None,
        owner_id: Optional[str] = None,
        item_type: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = Query(settings.FEED_DEFAULT_LIMIT, gt=0),
        offset: int = Query(0, ge=0),
        sort: Optional[str] = None,
        viewer_id: Optional[str] = None,
    ):
        request = FeedRequest(
            filters=FeedFilters(tag_id=tag_id, owner_id=owner_id, item_type=item_type, search=search),
            limit=limit,
            offset=offset,
            sort_mode=SortMode.parse(sort),
        )
        result = await engine.compute(request, viewer=ViewerContext(viewer_id=viewer_id))
        return result.model_dump(mode="json")

    @app.post("/items/{item_id}/views")
    async def record_view(item_id: int, viewer_id: str = Query(..., min_length=1)):
        if not hasattr(history, "record_view"):
            raise HTTPException(status_code=501, detail="view history store is read-only")
        recorded = await history.record_view(viewer_id, item_id)
        return {"recorded": recorded}

    return app
