"""Trend scores from mention counts"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from data.tool_repository import ToolRepository
from schemas.domain import utc_now

logger = logging.getLogger(__name__)

TREND_WINDOW = timedelta(days=7)


def trend_score(recent_mentions: int, total_mentions: int) -> int:
    """
    Share of all mentions that happened in the last week, as 0-100.

    Tools with no recorded total but recent mentions score 10 per mention, capped at 100.
    """
    if total_mentions > 0:
        return min(100, round(recent_mentions / total_mentions * 100))
    if recent_mentions > 0:
        return min(100, recent_mentions * 10)
    return 0


def calculate_trend_scores(repository: ToolRepository, now: Optional[datetime] = None) -> int:
    """Recompute every tool's trend score; writes only changed scores and returns how many changed"""
    now = now or utc_now()
    since = now - TREND_WINDOW

    tools = repository.list_tools()
    if not tools:
        logger.info("📭 [TRENDS] No tools found")
        return 0

    logger.info(f"📊 [TRENDS] Processing {len(tools)} tools")
    updated = 0
    for tool in tools:
        recent = repository.count_mentions_since(tool.id, since)
        score = trend_score(recent, tool.mention_count)
        if score != tool.trend_score:
            repository.update_trend_score(tool.id, score)
            updated += 1
            logger.info(f"✅ [TRENDS] {tool.name}: {tool.trend_score:g} → {score}")

    logger.info(f"📊 [TRENDS] Updated {updated} tools")
    return updated
