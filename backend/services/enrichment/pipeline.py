"""
Enrichment pipeline: scrape -> classify pricing -> analyze trust -> persist.

Analysis jobs move pending -> processing -> scraped -> classifying ->
completed, or to failed with the error recorded.
"""

import logging
import re
import urllib.parse
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple

from data.tool_repository import ToolRepository
from schemas.domain import (
    AnalysisJob,
    Category,
    JobStatus,
    Pricing,
    ScrapedSite,
    Tool,
    TrustScore,
    utc_now,
)
from services.enrichment.pricing_classifier import PricingClassifier
from services.enrichment.scraper import scrape_tool_website
from services.enrichment.trust_analyzer import TrustAnalyzer

logger = logging.getLogger(__name__)


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def name_from_url(url: str) -> str:
    host = urllib.parse.urlparse(url).netloc or url
    host = host.split(":")[0]
    if host.startswith("www."):
        host = host[4:]
    return host.split(".")[0].capitalize() if host else "Unknown"


class EnrichmentPipeline:
    def __init__(
        self,
        repository: ToolRepository,
        pricing_classifier: PricingClassifier,
        trust_analyzer: TrustAnalyzer,
        scraper: Callable[[str], ScrapedSite] = scrape_tool_website,
    ):
        self.repository = repository
        self.pricing_classifier = pricing_classifier
        self.trust_analyzer = trust_analyzer
        self.scraper = scraper

    def _classify_and_save(self, tool: Tool, site: ScrapedSite) -> Tuple[Pricing, TrustScore]:
        pricing = self.pricing_classifier.classify(site, source_url=tool.official_url)
        trust = self.trust_analyzer.analyze(tool.name, site, source_url=tool.official_url)

        self.repository.save_pricing(tool.id, pricing)
        self.repository.save_trust_score(tool.id, trust)
        self.repository.mark_verified(tool.id)
        return pricing, trust

    def enrich_tool(self, tool_id: str) -> Tuple[Pricing, TrustScore]:
        """Re-scrape and re-classify an existing tool"""
        tool = self.repository.get_tool(tool_id)
        if tool is None:
            raise LookupError(f"Tool not found: {tool_id}")
        if not tool.official_url:
            raise ValueError(f"Tool {tool_id} has no official URL")

        site = self.scraper(tool.official_url)
        pricing, trust = self._classify_and_save(tool, site)
        logger.info(f"✨ [ENRICH] {tool.name}: pricing={pricing.model.value} trust={trust.overall:.0f}")
        return pricing, trust

    def _resolve_tool(self, job: AnalysisJob, site: ScrapedSite) -> Tool:
        """Tool the job refers to, creating a new record for an unknown URL"""
        if job.tool_id:
            tool = self.repository.get_tool(job.tool_id)
            if tool is not None:
                return tool

        tool = self.repository.find_tool_by_url(job.url)
        if tool is not None:
            return tool

        name = job.tool_name or name_from_url(job.url)
        now = utc_now()
        tool = Tool(
            id=job.tool_id or slugify(name),
            name=name,
            description=site.homepage_text[:500] or f"AI tool: {name}",
            category=job.category or Category.PRODUCTIVITY,
            official_url=job.url,
            first_seen_at=now,
            last_verified_at=now,
        )
        self.repository.save_tool(tool)
        logger.info(f"🆕 [ENRICH] Added tool {tool.id} from {job.url}")
        return tool

    def process_job(self, job_id: str) -> AnalysisJob:
        job = self.repository.get_job(job_id)
        if job is None:
            raise LookupError(f"Analysis job not found: {job_id}")
        if job.status != JobStatus.PENDING:
            logger.info(f"⏭️  [JOBS] Job {job_id} is {job.status.value}, skipping")
            return job

        try:
            self.repository.update_job(job_id, JobStatus.PROCESSING)
            site = self.scraper(job.url)
            self.repository.update_job(job_id, JobStatus.SCRAPED)

            tool = self._resolve_tool(job, site)
            self.repository.update_job(job_id, JobStatus.CLASSIFYING, tool_id=tool.id)
            self._classify_and_save(tool, site)

            self.repository.update_job(job_id, JobStatus.COMPLETED, tool_id=tool.id)
            logger.info(f"✅ [JOBS] Job {job_id} completed for {job.url}")
        except Exception as e:
            logger.error(f"❌ [JOBS] Job {job_id} failed: {type(e).__name__}: {e}")
            self.repository.update_job(job_id, JobStatus.FAILED, error=str(e))

        return self.repository.get_job(job_id)

    def run_pending_jobs(self, limit: int = 10) -> List[AnalysisJob]:
        pending = self.repository.jobs_with_status(JobStatus.PENDING, limit=limit)
        if not pending:
            logger.info("📭 [JOBS] No pending jobs found")
            return []

        logger.info(f"📋 [JOBS] Found {len(pending)} pending jobs")
        return [self.process_job(job.id) for job in pending]

    def refresh_trust_scores(self, max_age_days: int = 30, now: Optional[datetime] = None) -> int:
        """Re-analyze tools whose trust score is missing or older than max_age_days"""
        now = now or utc_now()
        cutoff = now - timedelta(days=max_age_days)
        refreshed = 0

        for tool in self.repository.list_tools():
            trust = self.repository.get_trust_score(tool.id)
            if trust is not None and trust.analyzed_at is not None and trust.analyzed_at > cutoff:
                continue
            if not tool.official_url:
                continue

            try:
                site = self.scraper(tool.official_url)
                trust = self.trust_analyzer.analyze(tool.name, site, source_url=tool.official_url)
            except Exception as e:
                logger.warning(f"⚠️  [TRUST] Could not refresh {tool.name}: {e}")
                continue

            self.repository.save_trust_score(tool.id, trust)
            refreshed += 1
            logger.info(f"🛡️ [TRUST] Refreshed {tool.name}: {trust.overall:.0f}/100")

        logger.info(f"🛡️ [TRUST] Refreshed {refreshed} trust scores")
        return refreshed
