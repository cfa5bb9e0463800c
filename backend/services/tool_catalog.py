"""
Tool catalog: two-tier retrieval over the document store and the static dataset.

Precedence:
  1. The store call fails or times out -> serve the fallback tier.
  2. The store call succeeds with zero matches -> serve the fallback tier when
     the caller allows it (a browse session that has not yet had a non-empty
     primary load) or when the store holds no tools at all.
  3. Otherwise serve the primary tier.

Every page records the tier it came from.
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from data.fallback_tools import load_fallback_tools
from data.tool_repository import ToolRepository
from schemas.domain import SORT_TO_STORE, DataTier, Tool, ToolPage, ToolQuery, utc_now
from services.tool_filters import apply_filters, freshness_cutoff, sort_tools
from utils.errors import ToolNotFoundError

logger = logging.getLogger(__name__)


class PrimaryUnavailable(Exception):
    """The store call raised or missed its deadline"""
    pass


class ToolCatalog:
    """Listing, single-tool lookup and category counts with static fallback"""

    def __init__(
        self,
        repository: Optional[ToolRepository],
        fallback_tools: Optional[List[Tool]] = None,
        timeout: float = 3.0,
        max_scan: int = 500,  # documents per store read
    ):
        self.repository = repository
        self.fallback_tools = list(fallback_tools) if fallback_tools is not None else load_fallback_tools()
        self.timeout = timeout
        self.max_scan = max_scan

    async def call_primary(self, func: Callable, *args):
        """Run a blocking repository call in a worker thread, raced against the timeout"""
        if self.repository is None:
            raise PrimaryUnavailable("No document store configured")
        try:
            return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.warning(f"⏱️ [CATALOG] Store call timed out after {self.timeout}s")
            raise PrimaryUnavailable("Store call timed out") from e
        except Exception as e:
            logger.warning(f"⚠️ [CATALOG] Store call failed: {type(e).__name__}: {e}")
            raise PrimaryUnavailable(str(e)) from e

    def _scan_primary(self, query: ToolQuery, now: datetime) -> List[Tool]:
        filters = query.filters
        # The store can only push down a single category
        category = filters.categories[0] if len(filters.categories) == 1 else None
        return self.repository.query_tools(
            category=category,
            freshness_cutoff=freshness_cutoff(filters.freshness, now),
            sort=SORT_TO_STORE[query.sort],
            batch_size=self.max_scan,
        )

    @staticmethod
    def build_page(tools: List[Tool], query: ToolQuery, now: datetime, tier: DataTier) -> ToolPage:
        """Filter, sort and paginate a candidate list"""
        matched = sort_tools(apply_filters(tools, query.filters, now), query.sort)
        total = len(matched)
        limit = max(query.limit, 0)
        window = matched[query.offset:query.offset + limit] if limit else []
        return ToolPage(
            tools=window,
            total=total,
            has_more=query.offset + limit < total,
            tier=tier,
        )

    async def list_tools(
        self,
        query: ToolQuery,
        allow_empty_fallback: bool = False,
        now: Optional[datetime] = None,
    ) -> ToolPage:
        now = now or utc_now()

        try:
            candidates = await self.call_primary(self._scan_primary, query, now)
        except PrimaryUnavailable:
            logger.info("📦 [CATALOG] Serving listing from fallback dataset")
            return self.build_page(self.fallback_tools, query, now, DataTier.FALLBACK)

        page = self.build_page(candidates, query, now, DataTier.PRIMARY)
        if page.total == 0 and (allow_empty_fallback or await self.store_is_empty()):
            logger.info("📦 [CATALOG] Empty result, serving fallback dataset")
            return self.build_page(self.fallback_tools, query, now, DataTier.FALLBACK)

        logger.info(f"🔎 [CATALOG] {page.total} tools matched (sort={query.sort.value})")
        return page

    async def store_is_empty(self) -> bool:
        """True only when the store answered and holds no tools at all"""
        try:
            return await self.call_primary(self.repository.count_tools) == 0
        except PrimaryUnavailable:
            return False

    async def context_tools(self, limit: int = 100) -> List[Tool]:
        """Tools used to ground the AI features; the static dataset when the store fails or is empty"""
        try:
            tools = await self.call_primary(lambda: self.repository.list_tools(limit))
        except PrimaryUnavailable:
            tools = []
        return tools or self.fallback_tools[:limit]

    def fallback_tool(self, tool_id: str) -> Optional[Tool]:
        for tool in self.fallback_tools:
            if tool.id == tool_id:
                return tool
        return None

    async def get_tool(self, tool_id: str) -> Tool:
        """Primary lookup, then the static dataset; raises ToolNotFoundError when neither has it"""
        try:
            tool = await self.call_primary(lambda: self.repository.get_tool(tool_id))
        except PrimaryUnavailable:
            tool = None

        if tool is not None:
            return tool

        tool = self.fallback_tool(tool_id)
        if tool is not None:
            logger.info(f"📦 [CATALOG] Tool {tool_id} served from fallback dataset")
            return tool

        raise ToolNotFoundError(tool_id)

    async def category_counts(self) -> List[Dict]:
        """Tools per category, largest first; counted over the static dataset when the store fails"""
        try:
            counts = await self.call_primary(lambda: self.repository.category_counts())
        except PrimaryUnavailable:
            counts = {}
            for tool in self.fallback_tools:
                counts[tool.category.value] = counts.get(tool.category.value, 0) + 1

        return [
            {"name": name, "count": count}
            for name, count in sorted(counts.items(), key=lambda item: item[1], reverse=True)
        ]
