"""
Unit tests for ToolCatalog two-tier retrieval and browse sessions
"""

import asyncio
import os
import shutil
import sys
import tempfile
import time
import unittest
from unittest.mock import Mock

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

from factories import NOW, make_tool
from data.db import SQLiteDocumentStore
from data.tool_repository import ToolRepository
from schemas.domain import DataTier, SortOption, StoreSort, ToolFilters, ToolPage, ToolQuery
from services.browse_session import BrowseSession, BrowseSessionRegistry, SessionClosedError
from services.tool_catalog import ToolCatalog
from utils.errors import ToolNotFoundError


def run(coro):
    return asyncio.run(coro)


class TestToolCatalog(unittest.TestCase):
    """Test cases for listing, lookup and fallback precedence"""

    def setUp(self):
        self.repository = Mock(spec=ToolRepository)
        self.fallback = [
            make_tool("fallback-a", trend_score=30),
            make_tool("fallback-b", trend_score=60, category="Code Generation"),
        ]
        self.catalog = ToolCatalog(self.repository, fallback_tools=self.fallback, timeout=0.2)
        self.primary = [make_tool(f"tool-{i}", trend_score=10 * i) for i in range(5)]

    def test_primary_listing_is_filtered_sorted_and_paged(self):
        self.repository.query_tools.return_value = list(self.primary)

        page = run(self.catalog.list_tools(ToolQuery(limit=2, offset=0), now=NOW))

        self.assertEqual(page.tier, DataTier.PRIMARY)
        self.assertEqual(page.total, 5)
        self.assertTrue(page.has_more)
        self.assertEqual([t.id for t in page.tools], ["tool-4", "tool-3"])

        last = run(self.catalog.list_tools(ToolQuery(limit=2, offset=4), now=NOW))
        self.assertEqual([t.id for t in last.tools], ["tool-0"])
        self.assertFalse(last.has_more)

    def test_pushes_down_single_category_and_store_sort(self):
        self.repository.query_tools.return_value = []
        query = ToolQuery(filters=ToolFilters(categories=["Code Generation"]), sort=SortOption.ESTABLISHED)

        run(self.catalog.list_tools(query, now=NOW))

        kwargs = self.repository.query_tools.call_args.kwargs
        self.assertEqual(kwargs["category"], "Code Generation")
        self.assertEqual(kwargs["sort"], StoreSort.MENTIONS)
        self.assertIsNone(kwargs["freshness_cutoff"])

    def test_multiple_categories_are_filtered_client_side(self):
        self.repository.query_tools.return_value = []
        query = ToolQuery(filters=ToolFilters(categories=["Code Generation", "Productivity"]))

        run(self.catalog.list_tools(query, now=NOW))

        self.assertIsNone(self.repository.query_tools.call_args.kwargs["category"])

    def test_zero_limit_returns_no_tools(self):
        self.repository.query_tools.return_value = list(self.primary)
        page = run(self.catalog.list_tools(ToolQuery(limit=0), now=NOW))
        self.assertEqual(page.tools, [])
        self.assertEqual(page.total, 5)

    def test_store_failure_serves_fallback(self):
        self.repository.query_tools.side_effect = RuntimeError("store down")

        page = run(self.catalog.list_tools(ToolQuery(), now=NOW))

        self.assertEqual(page.tier, DataTier.FALLBACK)
        self.assertEqual([t.id for t in page.tools], ["fallback-b", "fallback-a"])

    def test_store_timeout_serves_fallback(self):
        self.repository.query_tools.side_effect = lambda **kwargs: time.sleep(0.5) or []
        self.catalog.timeout = 0.05

        page = run(self.catalog.list_tools(ToolQuery(), now=NOW))

        self.assertEqual(page.tier, DataTier.FALLBACK)

    def test_fallback_results_respect_filters(self):
        self.repository.query_tools.side_effect = RuntimeError("store down")
        query = ToolQuery(filters=ToolFilters(categories=["Code Generation"]))

        page = run(self.catalog.list_tools(query, now=NOW))

        self.assertEqual([t.id for t in page.tools], ["fallback-b"])

    def test_empty_primary_without_permission_stays_primary(self):
        self.repository.query_tools.return_value = []
        self.repository.count_tools.return_value = 4

        page = run(self.catalog.list_tools(ToolQuery(), now=NOW))

        self.assertEqual(page.tier, DataTier.PRIMARY)
        self.assertEqual(page.total, 0)
        self.assertFalse(page.has_more)

    def test_empty_store_serves_fallback_without_permission(self):
        self.repository.query_tools.return_value = []
        self.repository.count_tools.return_value = 0

        page = run(self.catalog.list_tools(ToolQuery(), now=NOW))

        self.assertEqual(page.tier, DataTier.FALLBACK)
        self.assertEqual(page.total, 2)

    def test_count_failure_keeps_empty_primary(self):
        self.repository.query_tools.return_value = []
        self.repository.count_tools.side_effect = RuntimeError("store down")

        page = run(self.catalog.list_tools(ToolQuery(), now=NOW))

        self.assertEqual(page.tier, DataTier.PRIMARY)

    def test_empty_primary_with_permission_serves_fallback(self):
        self.repository.query_tools.return_value = []

        page = run(self.catalog.list_tools(ToolQuery(), allow_empty_fallback=True, now=NOW))

        self.assertEqual(page.tier, DataTier.FALLBACK)
        self.assertEqual(page.total, 2)

    def test_no_repository_always_uses_fallback(self):
        catalog = ToolCatalog(None, fallback_tools=self.fallback)
        page = run(catalog.list_tools(ToolQuery(), now=NOW))
        self.assertEqual(page.tier, DataTier.FALLBACK)

    def test_get_tool_prefers_store_then_fallback(self):
        stored = make_tool("fallback-a", trend_score=99)
        self.repository.get_tool.return_value = stored
        self.assertEqual(run(self.catalog.get_tool("fallback-a")).trend_score, 99)

        self.repository.get_tool.return_value = None
        self.assertEqual(run(self.catalog.get_tool("fallback-a")).trend_score, 30)

        self.repository.get_tool.side_effect = RuntimeError("store down")
        self.assertEqual(run(self.catalog.get_tool("fallback-b")).id, "fallback-b")

    def test_get_unknown_tool_raises(self):
        self.repository.get_tool.return_value = None
        with self.assertRaises(ToolNotFoundError) as ctx:
            run(self.catalog.get_tool("nope"))
        self.assertEqual(ctx.exception.status_code, 404)

    def test_category_counts(self):
        self.repository.category_counts.return_value = {"Productivity": 2, "Code Generation": 7}
        counts = run(self.catalog.category_counts())
        self.assertEqual(counts[0], {"name": "Code Generation", "count": 7})

        self.repository.category_counts.side_effect = RuntimeError("store down")
        counts = run(self.catalog.category_counts())
        self.assertEqual(
            sorted((c["name"], c["count"]) for c in counts),
            [("Code Generation", 1), ("Image Generation", 1)],
        )

    def test_context_tools_fall_back_when_store_empty(self):
        self.repository.list_tools.return_value = []
        self.assertEqual(run(self.catalog.context_tools()), self.fallback)

        self.repository.list_tools.return_value = self.primary
        self.assertEqual(run(self.catalog.context_tools()), self.primary)


class TestCatalogOverStore(unittest.TestCase):
    """Listings over a real SQLite store holding more tools than one store read returns"""

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.store = SQLiteDocumentStore(os.path.join(self.tmpdir, "catalog.db"))
        repository = ToolRepository(self.store)
        for i in range(25):
            repository.save_tool(make_tool(f"tool-{i:02d}", mention_count=i))
        self.catalog = ToolCatalog(repository, fallback_tools=[], max_scan=10)

    def tearDown(self):
        self.store.close()
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_total_and_pages_cover_every_stored_tool(self):
        query = ToolQuery(sort=SortOption.ESTABLISHED, limit=3, offset=20)

        page = run(self.catalog.list_tools(query, now=NOW))

        self.assertEqual(page.tier, DataTier.PRIMARY)
        self.assertEqual(page.total, 25)
        self.assertTrue(page.has_more)
        self.assertEqual([t.id for t in page.tools], ["tool-04", "tool-03", "tool-02"])

        last = run(self.catalog.list_tools(ToolQuery(sort=SortOption.ESTABLISHED, limit=3, offset=23), now=NOW))
        self.assertEqual([t.id for t in last.tools], ["tool-01", "tool-00"])
        self.assertFalse(last.has_more)

    def test_client_side_filter_counts_past_first_batch(self):
        query = ToolQuery(filters=ToolFilters(pricing_models=["freemium"]), limit=5)

        page = run(self.catalog.list_tools(query, now=NOW))

        self.assertEqual(page.total, 25)
        self.assertTrue(page.has_more)


class TestBrowseSession(unittest.TestCase):
    """Test cases for per-session fallback state"""

    def setUp(self):
        self.repository = Mock(spec=ToolRepository)
        self.catalog = ToolCatalog(self.repository, fallback_tools=[make_tool("fallback-a")])

    def test_empty_fallback_only_until_first_primary_load(self):
        session = BrowseSession(self.catalog)

        self.repository.query_tools.return_value = []
        first = run(session.load(ToolQuery(), now=NOW))
        self.assertEqual(first.tier, DataTier.FALLBACK)
        self.assertFalse(session.has_loaded_from_primary)

        self.repository.query_tools.return_value = [make_tool("real")]
        second = run(session.load(ToolQuery(), now=NOW))
        self.assertEqual(second.tier, DataTier.PRIMARY)
        self.assertTrue(session.has_loaded_from_primary)

        self.repository.query_tools.return_value = []
        self.repository.count_tools.return_value = 1
        third = run(session.load(ToolQuery(), now=NOW))
        self.assertEqual(third.tier, DataTier.PRIMARY)
        self.assertEqual(third.total, 0)
        self.assertIs(session.current, third)

    def test_closed_session_rejects_loads(self):
        session = BrowseSession(self.catalog)
        session.close()
        with self.assertRaises(SessionClosedError):
            run(session.load(ToolQuery()))


class ControlledCatalog:
    """Catalog whose responses complete only when the test releases them"""

    def __init__(self):
        self.pending = []

    async def list_tools(self, query, allow_empty_fallback=False, now=None):
        release = asyncio.Event()
        page = ToolPage(tools=[make_tool(f"page-{query.offset}")], total=1, tier=DataTier.PRIMARY)
        self.pending.append(release)
        await release.wait()
        return page


class TestStaleResponses(unittest.IsolatedAsyncioTestCase):
    """A response that finishes after a newer request started is discarded"""

    async def test_late_older_response_is_discarded(self):
        catalog = ControlledCatalog()
        session = BrowseSession(catalog)

        older = asyncio.create_task(session.load(ToolQuery(offset=1)))
        await asyncio.sleep(0)
        newer = asyncio.create_task(session.load(ToolQuery(offset=2)))
        await asyncio.sleep(0)

        catalog.pending[1].set()
        newer_page = await newer
        catalog.pending[0].set()
        older_page = await older

        self.assertIsNone(older_page)
        self.assertEqual(newer_page.tools[0].id, "page-2")
        self.assertIs(session.current, newer_page)

    async def test_early_older_response_is_still_discarded(self):
        catalog = ControlledCatalog()
        session = BrowseSession(catalog)

        older = asyncio.create_task(session.load(ToolQuery(offset=1)))
        await asyncio.sleep(0)
        newer = asyncio.create_task(session.load(ToolQuery(offset=2)))
        await asyncio.sleep(0)

        catalog.pending[0].set()
        self.assertIsNone(await older)
        self.assertIsNone(session.current)

        catalog.pending[1].set()
        self.assertEqual((await newer).tools[0].id, "page-2")
        self.assertEqual(session.generation, 2)


class TestBrowseSessionRegistry(unittest.TestCase):
    """Test cases for session lifecycle"""

    def test_create_get_end(self):
        registry = BrowseSessionRegistry(catalog=Mock())
        session = registry.create()

        self.assertIs(registry.get(session.session_id), session)
        self.assertTrue(registry.end(session.session_id))
        self.assertTrue(session.closed)
        self.assertIsNone(registry.get(session.session_id))
        self.assertFalse(registry.end(session.session_id))

    def test_evicts_least_recently_used(self):
        registry = BrowseSessionRegistry(catalog=Mock(), max_sessions=2)
        first = registry.create()
        second = registry.create()
        registry.get(first.session_id)
        registry.create()

        self.assertEqual(len(registry), 2)
        self.assertIsNone(registry.get(second.session_id))
        self.assertTrue(second.closed)
        self.assertIsNotNone(registry.get(first.session_id))


if __name__ == '__main__':
    unittest.main()
