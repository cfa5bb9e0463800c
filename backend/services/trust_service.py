"""Trust score lookup and badge labelling"""

import logging
from typing import Dict, Optional

from data.fallback_tools import load_fallback_trust_scores
from schemas.domain import TrustScore
from services.tool_catalog import PrimaryUnavailable, ToolCatalog

logger = logging.getLogger(__name__)

# (minimum score, label, level), highest threshold first
TRUST_BADGES = (
    (80, "High Trust", "high"),
    (60, "Moderate Trust", "moderate"),
    (40, "Low Trust", "low"),
)


def badge_label(score: float) -> str:
    for threshold, label, _ in TRUST_BADGES:
        if score >= threshold:
            return label
    return "Very Low Trust"


def badge_level(score: float) -> str:
    for threshold, _, level in TRUST_BADGES:
        if score >= threshold:
            return level
    return "very_low"


class TrustService:
    def __init__(self, catalog: ToolCatalog, fallback_scores: Optional[Dict[str, TrustScore]] = None):
        self.catalog = catalog
        self.fallback_scores = fallback_scores if fallback_scores is not None else load_fallback_trust_scores()

    async def get_trust_score(self, tool_id: str) -> Optional[TrustScore]:
        """Stored trust score, else the fallback dataset's, else None"""
        repository = self.catalog.repository
        try:
            trust = await self.catalog.call_primary(lambda: repository.get_trust_score(tool_id))
        except PrimaryUnavailable:
            trust = None

        if trust is None:
            trust = self.fallback_scores.get(tool_id)
        return trust

    @staticmethod
    def describe(trust: TrustScore) -> dict:
        """Trust score payload with its badge"""
        payload = trust.model_dump(mode="json", by_alias=True)
        payload["badge"] = {"label": badge_label(trust.overall), "level": badge_level(trust.overall)}
        return payload
