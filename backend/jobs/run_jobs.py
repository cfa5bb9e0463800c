"""
Out-of-band enrichment jobs.

Usage (from backend/):
    python -m jobs.run_jobs scrape --url https://example.com
    python -m jobs.run_jobs process-jobs [--limit 10]
    python -m jobs.run_jobs refresh-trust [--max-age-days 30]
    python -m jobs.run_jobs trends
    python -m jobs.run_jobs collect-mentions [--max-posts 50]
    python -m jobs.run_jobs seed
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from config import config
from data.db_wrapper import create_store
from data.fallback_tools import FALLBACK_TOOLS, load_fallback_tools, load_fallback_trust_scores
from data.tool_repository import ToolRepository
from integrations.anthropic_client import create_anthropic_client
from schemas.domain import JobStatus

logger = logging.getLogger(__name__)

NEEDS_LLM = {"process-jobs", "refresh-trust", "collect-mentions"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Findora enrichment jobs")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scrape = subparsers.add_parser("scrape", help="Scrape a single URL and print the extracted text")
    scrape.add_argument("--url", required=True, help="Tool website URL")

    process = subparsers.add_parser("process-jobs", help="Process pending analysis jobs")
    process.add_argument("--limit", type=int, default=10, help="Maximum jobs to process")

    refresh = subparsers.add_parser("refresh-trust", help="Re-analyze stale trust scores")
    refresh.add_argument("--max-age-days", type=int, default=30, help="Re-analyze scores older than this")

    subparsers.add_parser("trends", help="Recompute trend scores from mentions")

    collect = subparsers.add_parser("collect-mentions", help="Collect tool mentions from Reddit")
    collect.add_argument("--max-posts", type=int, default=50, help="Maximum posts to analyze")

    subparsers.add_parser("seed", help="Populate the store with the built-in tool dataset")

    return parser


def seed_store(repository: ToolRepository) -> int:
    trust_scores = load_fallback_trust_scores()
    for tool in load_fallback_tools():
        repository.save_tool(tool)
        if tool.id in trust_scores:
            repository.save_trust_score(tool.id, trust_scores[tool.id])
    logger.info(f"🌱 [SEED] Seeded {len(FALLBACK_TOOLS)} tools")
    return len(FALLBACK_TOOLS)


def _build_pipeline(repository: ToolRepository, llm_client, model: str):
    from services.enrichment.pipeline import EnrichmentPipeline
    from services.enrichment.pricing_classifier import PricingClassifier
    from services.enrichment.trust_analyzer import TrustAnalyzer

    return EnrichmentPipeline(
        repository,
        PricingClassifier(llm_client, model=model),
        TrustAnalyzer(llm_client, model=model),
    )


def main(argv: Optional[List[str]] = None, settings=None) -> int:
    settings = settings or config
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "scrape":
        from services.enrichment.scraper import ScrapeError, scrape_tool_website
        try:
            site = scrape_tool_website(args.url)
        except ScrapeError as e:
            logger.error(f"❌ Scraping failed: {e}")
            return 1
        print(json.dumps(site.model_dump(mode="json", by_alias=True), indent=2))
        return 0

    # Missing credentials are fatal for server-side jobs
    errors = settings.validate_for_jobs(needs_reddit=args.command == "collect-mentions") if args.command in NEEDS_LLM else []
    if settings.USE_POSTGRES and not settings.DATABASE_URL:
        errors.append("DATABASE_URL must be set when USE_POSTGRES=true")
    if errors:
        for error in dict.fromkeys(errors):
            logger.error(f"❌ {error}")
        return 2

    store = create_store(settings)
    repository = ToolRepository(store)
    try:
        if args.command == "seed":
            seed_store(repository)
            return 0

        if args.command == "trends":
            from services.enrichment.trend_calculator import calculate_trend_scores
            calculate_trend_scores(repository)
            return 0

        llm_client = create_anthropic_client(settings.ANTHROPIC_API_KEY)
        if llm_client is None:
            logger.error("❌ Could not initialize the Anthropic client")
            return 2

        if args.command == "process-jobs":
            jobs = _build_pipeline(repository, llm_client, settings.ANTHROPIC_MODEL).run_pending_jobs(limit=args.limit)
            failed = [job for job in jobs if job.status == JobStatus.FAILED]
            logger.info(f"🎉 Processed {len(jobs)} jobs ({len(failed)} failed)")
            return 0

        if args.command == "refresh-trust":
            _build_pipeline(repository, llm_client, settings.ANTHROPIC_MODEL).refresh_trust_scores(max_age_days=args.max_age_days)
            return 0

        if args.command == "collect-mentions":
            from services.enrichment.mention_collector import MentionCollector, RedditClient
            reddit = RedditClient(settings.REDDIT_CLIENT_ID, settings.REDDIT_CLIENT_SECRET)
            collector = MentionCollector(repository, reddit, llm_client, model=settings.ANTHROPIC_MODEL)
            collector.collect(max_posts=args.max_posts)
            return 0
    finally:
        store.close()

    return 1


if __name__ == "__main__":
    sys.exit(main())
