from datetime import timedelta

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from feedrank.db import init_db
from feedrank.engine import FeedRankingEngine
from feedrank.models import ItemRow, ItemTag, ItemView
from feedrank.schemas import FeedFilters, FeedRequest, PageOrder, ViewerContext
from feedrank.services.item_repository import SqlItemRepository
from feedrank.services.view_history import SqlViewHistoryStore

from fakes import T


@pytest_asyncio.fixture
async def sessionmaker():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    await init_db(engine)
    maker = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    rows = [
        ItemRow(id=1, owner_id="alice", item_type="general", title="Pinned notice", hot_score=10, is_pinned=True, created_at=T - timedelta(hours=10)),
        ItemRow(id=2, owner_id="bob", item_type="general", title="Fresh bike", description="road bike", hot_score=50, created_at=T - timedelta(hours=1)),
        ItemRow(id=3, owner_id="bob", item_type="secondhand", title="Desk lamp", hot_score=50, created_at=T - timedelta(hours=2)),
        ItemRow(id=4, owner_id="carol", item_type="qna", title="Where to eat?", hot_score=5, created_at=T - timedelta(hours=8)),
        ItemRow(id=5, owner_id="carol", item_type="general", title="Market day", hot_score=100, created_at=T - timedelta(hours=8)),
        ItemRow(id=6, owner_id="dave", item_type="general", title="Unscored", hot_score=None, created_at=T - timedelta(hours=30)),
    ]
    tags = [ItemTag(item_id=2, tag_id="bikes", is_primary=True), ItemTag(item_id=5, tag_id="market"), ItemTag(item_id=2, tag_id="market")]
    async with maker() as s:
        s.add_all(rows + tags)
        s.add(ItemView(viewer_id="u1", item_id=2))
        await s.commit()

    yield maker
    await engine.dispose()


@pytest.mark.asyncio
async def test_fetch_page_newest_first(sessionmaker):
    repo = SqlItemRepository(sessionmaker)

    page = await repo.fetch_page(FeedFilters(), limit=10, offset=0)

    assert [i.id for i in page] == [2, 3, 4, 5, 1, 6]
    assert page[0].created_at == T - timedelta(hours=1)
    assert page[0].tag_ids == frozenset({"bikes", "market"})
    assert page[-1].popularity_score == 0.0


@pytest.mark.asyncio
async def test_fetch_page_popular_order_and_paging(sessionmaker):
    repo = SqlItemRepository(sessionmaker)

    page = await repo.fetch_page(FeedFilters(), limit=3, offset=1, order=PageOrder.POPULAR)

    # 5 (100), then the 50s newest first, then 1 (10)
    assert [i.id for i in page] == [2, 3, 1]


@pytest.mark.asyncio
async def test_fetch_page_filters(sessionmaker):
    repo = SqlItemRepository(sessionmaker)

    by_owner = await repo.fetch_page(FeedFilters(owner_id="bob"), 10, 0)
    by_type = await repo.fetch_page(FeedFilters(item_type="general"), 10, 0)
    by_search = await repo.fetch_page(FeedFilters(search="BIKE"), 10, 0)
    by_tag = await repo.fetch_page(FeedFilters(tag_id="market"), 10, 0)

    assert [i.id for i in by_owner] == [2, 3]
    assert [i.id for i in by_type] == [2, 5, 1, 6]
    assert [i.id for i in by_search] == [2]
    assert [i.id for i in by_tag] == [2, 5]


@pytest.mark.asyncio
async def test_view_history_lookup_is_scoped(sessionmaker):
    store = SqlViewHistoryStore(sessionmaker)

    assert await store.get_viewed_ids("u1", {1, 2, 3}) == {2}
    assert await store.get_viewed_ids("u1", {3}) == set()
    assert await store.get_viewed_ids("u2", {2}) == set()
    assert await store.get_viewed_ids("u1", set()) == set()


@pytest.mark.asyncio
async def test_record_view_is_idempotent(sessionmaker):
    store = SqlViewHistoryStore(sessionmaker)

    assert await store.record_view("u2", 5) is True
    assert await store.record_view("u2", 5) is False
    assert await store.get_viewed_ids("u2", {5, 4}) == {5}


@pytest.mark.asyncio
async def test_engine_over_sql_adapters(sessionmaker):
    engine = FeedRankingEngine(SqlItemRepository(sessionmaker), SqlViewHistoryStore(sessionmaker))

    result = await engine.compute(FeedRequest(limit=10), viewer=ViewerContext(viewer_id="u1"), now=T)

    assert result.ids() == [1, 2, 3, 5, 4, 6]
    assert result.degraded is False


@pytest.mark.asyncio
async def test_popular_order_treats_missing_score_as_zero(sessionmaker):
    async with sessionmaker() as s:
        s.add(ItemRow(id=7, owner_id="dave", title="Zero", hot_score=0, created_at=T - timedelta(hours=40)))
        await s.commit()
    repo = SqlItemRepository(sessionmaker)

    page = await repo.fetch_page(FeedFilters(owner_id="dave"), limit=10, offset=0, order=PageOrder.POPULAR)

    # both score 0, so the newer unscored item 6 comes first
    assert [i.id for i in page] == [6, 7]
