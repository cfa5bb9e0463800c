"""Side-by-side comparison of 2 to 4 tools"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from schemas.domain import Tool, TrustScore
from services.tool_catalog import ToolCatalog
from services.trust_service import TrustService
from utils.errors import ValidationError

logger = logging.getLogger(__name__)

MIN_COMPARE = 2
MAX_COMPARE = 4

_PRICE_RE = re.compile(r"(\d+(?:\.\d+)?)")


def parse_start_price(start_price: str) -> Optional[float]:
    """First number in a price string like '$10/month'; None for 'N/A' or free-form text"""
    match = _PRICE_RE.search((start_price or "").replace(",", ""))
    return float(match.group(1)) if match else None


def entry_price(tool: Tool) -> Optional[float]:
    """Cheapest way in: 0 with a free tier, else the paid starting price"""
    if tool.pricing.free_tier.exists:
        return 0.0
    return parse_start_price(tool.pricing.paid_tier.start_price)


def comparison_highlights(entries: List[Tuple[Tool, Optional[TrustScore]]]) -> Dict[str, Any]:
    priced = [(tool, entry_price(tool)) for tool, _ in entries if entry_price(tool) is not None]
    trusted = [(tool, trust) for tool, trust in entries if trust is not None]

    cheapest = min(priced, key=lambda pair: pair[1])[0] if priced else None
    most_trusted = max(trusted, key=lambda pair: pair[1].overall)[0] if trusted else None

    return {
        "cheapest": cheapest.id if cheapest else None,
        "trulyFree": [tool.id for tool, _ in entries if tool.pricing.is_truly_free],
        "highestTrust": most_trusted.id if most_trusted else None,
    }


class ComparisonService:
    def __init__(self, catalog: ToolCatalog, trust_service: TrustService):
        self.catalog = catalog
        self.trust_service = trust_service

    async def compare(self, tool_ids: List[str]) -> Dict[str, Any]:
        """
        Resolve each tool (store, then fallback dataset) with its trust score.

        Raises ValidationError unless 2 to 4 distinct ids are given and
        ToolNotFoundError for an unknown id.
        """
        ids = list(dict.fromkeys(tid.strip() for tid in tool_ids if tid and tid.strip()))
        if not MIN_COMPARE <= len(ids) <= MAX_COMPARE:
            raise ValidationError(f"Select {MIN_COMPARE}-{MAX_COMPARE} distinct tools to compare (got {len(ids)})")

        entries = []
        for tool_id in ids:
            tool = await self.catalog.get_tool(tool_id)
            trust = await self.trust_service.get_trust_score(tool_id)
            entries.append((tool, trust))

        logger.info(f"⚖️ [COMPARE] Compared {len(entries)} tools: {', '.join(ids)}")

        return {
            "tools": [
                {
                    "tool": tool.model_dump(mode="json", by_alias=True),
                    "trust": TrustService.describe(trust) if trust else None,
                    "entryPrice": entry_price(tool),
                    "trulyFree": tool.pricing.is_truly_free,
                }
                for tool, trust in entries
            ],
            "highlights": comparison_highlights(entries),
        }
