"""
Client-side filter and sort pass over tool lists.

The store only understands a single category, a first-seen cutoff and one
ordering; everything else a listing asks for is evaluated here.
"""

from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from schemas.domain import SORT_TO_STORE, Freshness, SortOption, StoreSort, Tool, ToolFilters, utc_now

FRESHNESS_WINDOWS = {
    Freshness.DAY: timedelta(hours=24),
    Freshness.WEEK: timedelta(days=7),
    Freshness.MONTH: timedelta(days=30),
}


def freshness_cutoff(freshness: Freshness, now: Optional[datetime] = None) -> Optional[datetime]:
    """Earliest first-seen time admitted by the window, or None for 'all'"""
    window = FRESHNESS_WINDOWS.get(Freshness(freshness))
    if window is None:
        return None
    return (now or utc_now()) - window


def matches_filters(tool: Tool, filters: ToolFilters, now: Optional[datetime] = None) -> bool:
    free_tier = tool.pricing.free_tier

    if filters.truly_free and not tool.pricing.is_truly_free:
        return False
    if filters.no_signup and free_tier.requires_signup:
        return False
    if filters.commercial_use and not free_tier.commercial_use:
        return False
    if filters.pricing_models and tool.pricing.model not in filters.pricing_models:
        return False
    if filters.categories and tool.category not in filters.categories:
        return False

    cutoff = freshness_cutoff(filters.freshness, now)
    if cutoff is not None and tool.first_seen_at < cutoff:
        return False

    return True


def apply_filters(tools: Iterable[Tool], filters: ToolFilters, now: Optional[datetime] = None) -> List[Tool]:
    """Order-preserving subset of tools satisfying every active filter"""
    now = now or utc_now()
    return [tool for tool in tools if matches_filters(tool, filters, now)]


def _sort_key(sort):
    sort = normalize_sort(sort)
    if sort is SortOption.RISING:
        return lambda tool: tool.trend_score
    if sort is SortOption.RECENT:
        return lambda tool: tool.first_seen_at
    return lambda tool: tool.mention_count


def sort_tools(tools: Iterable[Tool], sort) -> List[Tool]:
    """Stable descending sort on the single key behind the sort option"""
    return sorted(tools, key=_sort_key(sort), reverse=True)


def normalize_sort(sort) -> SortOption:
    """Accept either the listing vocabulary (rising/recent/established) or the store one"""
    if isinstance(sort, SortOption):
        return sort
    value = sort.value if isinstance(sort, StoreSort) else str(sort).lower()
    for option in SortOption:
        if option.value == value:
            return option
    store_to_option = {store.value: option for option, store in SORT_TO_STORE.items()}
    if value in store_to_option:
        return store_to_option[value]
    raise ValueError(f"Unknown sort option: {sort}")
