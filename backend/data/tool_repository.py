"""
Tool repository: maps store documents to domain models and back.

Documents follow the directory's stored shapes (camelCase keys, pricing kept
under `pricingModel`). Missing fields fall back to the same defaults the
directory has always used: empty strings, zero counters, false flags and
"N/A" limits.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from data.document_store import DocumentStore
from schemas.domain import (
    AnalysisJob,
    Category,
    JobStatus,
    Mention,
    Pricing,
    StoreSort,
    Tool,
    TrustScore,
    utc_now,
)

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    StoreSort.TRENDING: "trendScore",
    StoreSort.FRESHNESS: "firstSeenAt",
    StoreSort.MENTIONS: "mentionCount",
}


def pricing_from_document(data: Dict[str, Any]) -> Pricing:
    free_tier = data.get("freeTier") or {}
    paid_tier = data.get("paidTier") or {}
    return Pricing.model_validate({
        "model": data.get("pricingModel") or data.get("model") or "free",
        "freeTier": {
            "exists": free_tier.get("exists") or False,
            "limit": free_tier.get("limit") or "N/A",
            "watermark": free_tier.get("watermark") or False,
            "requiresSignup": free_tier.get("requiresSignup") or False,
            "requiresCard": free_tier.get("requiresCard") or False,
            "commercialUse": free_tier.get("commercialUse") or False,
            "attribution": free_tier.get("attribution") or False,
        },
        "paidTier": {
            "startPrice": paid_tier.get("startPrice") or "N/A",
            "billingOptions": paid_tier.get("billingOptions") or [],
        },
        "confidence": data.get("confidence") or 0,
        "sourceUrl": data.get("sourceUrl") or "",
        "lastCheckedAt": data.get("lastCheckedAt"),
        "ambiguities": data.get("ambiguities") or [],
    })


def pricing_to_document(pricing: Pricing) -> Dict[str, Any]:
    document = pricing.model_dump(mode="json", by_alias=True)
    document["pricingModel"] = document.pop("model")
    return document


def tool_from_document(doc_id: str, data: Dict[str, Any], pricing: Optional[Pricing] = None) -> Tool:
    return Tool.model_validate({
        "id": doc_id,
        "name": data.get("name") or "",
        "description": data.get("description") or "",
        "category": data.get("category"),
        "officialUrl": data.get("officialUrl") or "",
        "firstSeenAt": data.get("firstSeenAt"),
        "lastVerifiedAt": data.get("lastVerifiedAt"),
        "mentionCount": data.get("mentionCount") or 0,
        "trendScore": data.get("trendScore") or 0,
        # A tool without a pricing record reads as free with no free tier
        "pricing": pricing if pricing is not None else Pricing(),
    })


def tool_to_document(tool: Tool) -> Dict[str, Any]:
    return tool.model_dump(mode="json", by_alias=True, exclude={"id", "pricing"})


class ToolRepository:
    """Typed access to the tools, pricing, trust_scores, mentions and analysis_jobs collections"""

    def __init__(self, store: DocumentStore):
        self.store = store

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    def _build_tools(self, rows) -> List[Tool]:
        pricing_docs = self.store.get_many("pricing", [doc_id for doc_id, _ in rows])
        tools = []
        for doc_id, data in rows:
            pricing_doc = pricing_docs.get(doc_id)
            try:
                pricing = pricing_from_document(pricing_doc) if pricing_doc else None
                tools.append(tool_from_document(doc_id, data, pricing))
            except (ValidationError, ValueError) as e:
                logger.warning(f"⚠️ [REPOSITORY] Skipping malformed tool document {doc_id}: {e}")
        return tools

    def query_tools(
        self,
        category: Optional[Category] = None,
        freshness_cutoff: Optional[datetime] = None,
        sort: StoreSort = StoreSort.TRENDING,
        limit: Optional[int] = None,
        batch_size: Optional[int] = None,
    ) -> List[Tool]:
        """Run the native part of a listing query: one category, first-seen cutoff, ordering, limit.

        With `batch_size` and no `limit`, the store is read `batch_size` documents at a time
        until it runs out.
        """
        where = []
        if category is not None:
            where.append(("category", "==", Category(category).value))
        if freshness_cutoff is not None:
            where.append(("firstSeenAt", ">=", freshness_cutoff))
        order_by = (SORT_FIELDS[StoreSort(sort)], True)

        if limit is not None or not batch_size:
            return self._build_tools(self.store.query("tools", where=where, order_by=order_by, limit=limit))

        tools = []
        offset = 0
        while True:
            rows = self.store.query("tools", where=where, order_by=order_by, limit=batch_size, offset=offset)
            tools.extend(self._build_tools(rows))
            if len(rows) < batch_size:
                return tools
            offset += len(rows)

    def list_tools(self, limit: Optional[int] = None) -> List[Tool]:
        return self._build_tools(self.store.query("tools", limit=limit))

    def get_tool(self, tool_id: str) -> Optional[Tool]:
        data = self.store.get("tools", tool_id)
        if data is None:
            return None
        return tool_from_document(tool_id, data, self.get_pricing(tool_id))

    def find_tool_by_url(self, url: str) -> Optional[Tool]:
        rows = self.store.query("tools", where=[("officialUrl", "==", url)], limit=1)
        tools = self._build_tools(rows)
        return tools[0] if tools else None

    def count_tools(self) -> int:
        return self.store.count("tools")

    def category_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for _, data in self.store.query("tools"):
            category = data.get("category")
            if category:
                counts[category] = counts.get(category, 0) + 1
        return counts

    def save_tool(self, tool: Tool) -> None:
        """Write the tool document and its pricing record"""
        self.store.set("tools", tool.id, tool_to_document(tool))
        self.save_pricing(tool.id, tool.pricing)

    def mark_verified(self, tool_id: str, when: Optional[datetime] = None) -> bool:
        return self.store.update("tools", tool_id, {"lastVerifiedAt": when or utc_now()})

    def increment_mention_count(self, tool_id: str) -> bool:
        data = self.store.get("tools", tool_id)
        if data is None:
            return False
        return self.store.update("tools", tool_id, {"mentionCount": (data.get("mentionCount") or 0) + 1})

    def update_trend_score(self, tool_id: str, score: float) -> bool:
        return self.store.update("tools", tool_id, {"trendScore": score})

    # ------------------------------------------------------------------
    # Pricing and trust
    # ------------------------------------------------------------------

    def get_pricing(self, tool_id: str) -> Optional[Pricing]:
        data = self.store.get("pricing", tool_id)
        return pricing_from_document(data) if data else None

    def save_pricing(self, tool_id: str, pricing: Pricing) -> None:
        self.store.set("pricing", tool_id, pricing_to_document(pricing))

    def get_trust_score(self, tool_id: str) -> Optional[TrustScore]:
        data = self.store.get("trust_scores", tool_id)
        return TrustScore.model_validate(data) if data else None

    def save_trust_score(self, tool_id: str, trust: TrustScore) -> None:
        self.store.set("trust_scores", tool_id, trust.model_dump(mode="json", by_alias=True))

    # ------------------------------------------------------------------
    # Mentions
    # ------------------------------------------------------------------

    def add_mention(self, mention: Mention) -> str:
        return self.store.add("mentions", mention.model_dump(mode="json", by_alias=True))

    def count_mentions_since(self, tool_id: str, since: Optional[datetime] = None) -> int:
        where = [("toolId", "==", tool_id)]
        if since is not None:
            where.append(("mentionedAt", ">=", since))
        return self.store.count("mentions", where)

    # ------------------------------------------------------------------
    # Analysis jobs
    # ------------------------------------------------------------------

    def create_job(
        self,
        url: str,
        tool_id: Optional[str] = None,
        tool_name: Optional[str] = None,
        category: Optional[Category] = None,
    ) -> AnalysisJob:
        now = utc_now()
        document = {
            "url": url,
            "toolId": tool_id,
            "toolName": tool_name,
            "category": Category(category).value if category else None,
            "status": JobStatus.PENDING.value,
            "error": None,
            "createdAt": now,
            "updatedAt": now,
        }
        job_id = self.store.add("analysis_jobs", document)
        logger.info(f"📋 [JOBS] Queued analysis job {job_id} for {url}")
        return AnalysisJob.model_validate({"id": job_id, **document})

    def get_job(self, job_id: str) -> Optional[AnalysisJob]:
        data = self.store.get("analysis_jobs", job_id)
        if data is None:
            return None
        return AnalysisJob.model_validate({"id": job_id, **data})

    def update_job(
        self,
        job_id: str,
        status: JobStatus,
        error: Optional[str] = None,
        tool_id: Optional[str] = None,
    ) -> bool:
        fields: Dict[str, Any] = {"status": JobStatus(status).value, "updatedAt": utc_now()}
        if error is not None:
            fields["error"] = error
        if tool_id is not None:
            fields["toolId"] = tool_id
        return self.store.update("analysis_jobs", job_id, fields)

    def jobs_with_status(self, status: JobStatus, limit: Optional[int] = None) -> List[AnalysisJob]:
        rows = self.store.query(
            "analysis_jobs",
            where=[("status", "==", JobStatus(status).value)],
            order_by=("createdAt", False),
            limit=limit,
        )
        return [AnalysisJob.model_validate({"id": doc_id, **data}) for doc_id, data in rows]
