"""Privacy and data-handling trust analysis of scraped website text"""

import logging

import anthropic
from pydantic import ValidationError

from integrations.anthropic_client import DEFAULT_MODEL, complete
from schemas.domain import ScrapedSite, TrustScore, utc_now
from utils.llm_json import LLMResponseError, extract_json

logger = logging.getLogger(__name__)


def default_trust_score(source_url: str = "") -> TrustScore:
    return TrustScore(
        overall=50,
        concerns=["Unable to analyze documents"],
        confidence=0.0,
        analyzed_at=utc_now(),
        source_url=source_url or None,
    )


class TrustAnalyzer:
    def __init__(self, client: anthropic.Anthropic, model: str = DEFAULT_MODEL):
        self.client = client
        self.model = model

    def _build_prompt(self, tool_name: str, site: ScrapedSite) -> str:
        # Privacy policy and terms pages are not scraped separately; the homepage and FAQ stand in
        return f"""Analyze the privacy and trustworthiness of "{tool_name}" based on the following documents.

HOMEPAGE/ABOUT:
{site.homepage_text[:8000]}

FAQ / HELP:
{site.faq_text[:5000]}

PRICING:
{site.pricing_text[:3000]}

Analyze and return ONLY valid JSON in this exact format:
{{
  "overall": 0-100,
  "dataTraining": "explicit" | "opting-out" | "unknown" | "no-training",
  "dataRetention": "permanent" | "limited" | "minimal" | "unknown",
  "countryOfOrigin": "country name or 'unknown'",
  "privacyPolicyQuality": "excellent" | "good" | "fair" | "poor" | "unknown",
  "thirdPartySharing": boolean,
  "compliance": ["GDPR", "CCPA"] or [],
  "concerns": ["list of specific concerns"],
  "confidence": 0.0-1.0
}}

Scoring Guidelines:
- dataTraining: "explicit" = clearly states they train on user data, "opting-out" = allows opt-out, "no-training" = explicitly states no training
- dataRetention: Assess how long data is kept
- privacyPolicyQuality: Rate clarity and completeness
- concerns: List specific red flags (e.g., "Vague data sharing policy")
- overall: 0 = very untrustworthy, 100 = very trustworthy

Return ONLY the JSON object, no additional text."""

    def analyze(self, tool_name: str, site: ScrapedSite, source_url: str = "") -> TrustScore:
        """Trust score from scraped text; an unusable reply yields the default score"""
        reply = complete(self.client, self._build_prompt(tool_name, site), model=self.model, max_tokens=1000, temperature=0.0)

        try:
            data = extract_json(reply)
            if not isinstance(data.get("overall"), (int, float)) or not data.get("dataTraining"):
                raise LLMResponseError("Invalid trust score structure")
            data["analyzedAt"] = utc_now()
            data["sourceUrl"] = source_url or None
            trust = TrustScore.model_validate(data)
        except (LLMResponseError, ValidationError) as e:
            logger.warning(f"🛡️ [TRUST] Unusable trust reply for {tool_name}: {e}")
            return default_trust_score(source_url)

        logger.info(f"🛡️ [TRUST] {tool_name}: {trust.overall:.0f}/100 (confidence {trust.confidence:.2f})")
        return trust
