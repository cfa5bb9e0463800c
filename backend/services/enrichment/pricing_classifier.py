"""Pricing transparency classification of scraped website text"""

import logging
from typing import Optional

import anthropic
from pydantic import ValidationError

from data.tool_repository import pricing_from_document
from integrations.anthropic_client import DEFAULT_MODEL, complete
from schemas.domain import Pricing, ScrapedSite, utc_now
from utils.llm_json import LLMResponseError, extract_json

logger = logging.getLogger(__name__)


def default_pricing(source_url: str = "", reason: str = "Pricing could not be classified automatically") -> Pricing:
    """Conservative record: free model, no free tier, zero confidence"""
    return Pricing(source_url=source_url, confidence=0.0, ambiguities=[reason])


def _clamp_confidence(value) -> float:
    try:
        return min(max(float(value), 0.0), 1.0)
    except (TypeError, ValueError):
        return 0.0


class PricingClassifier:
    def __init__(self, client: anthropic.Anthropic, model: str = DEFAULT_MODEL):
        self.client = client
        self.model = model

    def _build_prompt(self, site: ScrapedSite) -> str:
        return f"""You are a pricing transparency analyzer for an AI tool discovery platform.

Analyze the following website content and extract pricing information. Be thorough and accurate.

Homepage Text:
{site.homepage_text[:5000]}

Pricing Page Text:
{site.pricing_text[:5000]}

FAQ Text:
{site.faq_text[:3000]}

Extract pricing information and return ONLY valid JSON in this exact format:
{{
  "pricingModel": "free" | "freemium" | "paid" | "trial_only",
  "freeTier": {{
    "exists": boolean,
    "limit": "description of free tier limits (e.g., '20 credits per month' or 'Unlimited')",
    "watermark": boolean,
    "requiresSignup": boolean,
    "requiresCard": boolean,
    "commercialUse": boolean,
    "attribution": boolean
  }},
  "paidTier": {{
    "startPrice": "starting price string (e.g., '$19/month') or 'N/A'",
    "billingOptions": ["monthly", "annual"] or []
  }},
  "confidence": 0.0-1.0,
  "ambiguities": ["any unclear aspects"]
}}

Important rules:
- If no free tier exists, set exists: false
- If information is unclear, lower confidence and note in ambiguities
- Watermark: true only if explicitly mentioned or shown
- requiresCard: true only if credit card is required for free tier

Return ONLY the JSON object, no additional text."""

    def classify(self, site: ScrapedSite, source_url: str = "") -> Pricing:
        """
        Classify pricing from scraped text.

        anthropic.APIError propagates; a reply that is not usable JSON yields
        the conservative default record.
        """
        reply = complete(self.client, self._build_prompt(site), model=self.model, max_tokens=1200, temperature=0.0)

        try:
            data = extract_json(reply)
            if not data.get("pricingModel") or not isinstance(data.get("freeTier"), dict):
                raise LLMResponseError("Invalid classification structure")
            data["confidence"] = _clamp_confidence(data.get("confidence"))
            data["sourceUrl"] = source_url
            data["lastCheckedAt"] = utc_now()
            pricing = pricing_from_document(data)
        except (LLMResponseError, ValidationError, AttributeError) as e:
            logger.warning(f"💰 [CLASSIFIER] Unusable pricing reply for {source_url or 'site'}: {e}")
            return default_pricing(source_url)

        logger.info(f"💰 [CLASSIFIER] {source_url}: {pricing.model.value} (confidence {pricing.confidence:.2f})")
        return pricing
