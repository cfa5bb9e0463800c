"""
Static tool dataset served when the document store is unavailable.

Also used by the seed job to populate an empty store.
"""

from typing import Dict, List

from schemas.domain import Tool, TrustScore

FALLBACK_TOOLS: List[dict] = [
    {
        "id": "chatgpt",
        "name": "ChatGPT",
        "description": "Conversational assistant from OpenAI for writing, coding, analysis and creative tasks.",
        "category": "Writing Assistant",
        "officialUrl": "https://chat.openai.com",
        "firstSeenAt": "2022-11-30T00:00:00.000Z",
        "lastVerifiedAt": "2025-09-01T00:00:00.000Z",
        "mentionCount": 980,
        "trendScore": 72,
        "pricing": {
            "model": "freemium",
            "freeTier": {
                "exists": True,
                "limit": "Limited GPT-4o messages per 3 hours",
                "watermark": False,
                "requiresSignup": True,
                "requiresCard": False,
                "commercialUse": True,
                "attribution": False,
            },
            "paidTier": {"startPrice": "$20/month", "billingOptions": ["monthly"]},
            "confidence": 0.95,
            "sourceUrl": "https://openai.com/chatgpt/pricing",
            "lastCheckedAt": "2025-09-01T00:00:00.000Z",
        },
        "trust": {
            "overall": 85,
            "dataTraining": "opting-out",
            "dataRetention": "limited",
            "countryOfOrigin": "USA",
            "privacyPolicyQuality": "excellent",
            "thirdPartySharing": False,
            "compliance": ["GDPR", "CCPA"],
            "concerns": ["Conversations used for training unless disabled"],
            "confidence": 0.9,
        },
    },
    {
        "id": "claude",
        "name": "Claude",
        "description": "Anthropic's assistant for long documents, careful reasoning and extended conversations.",
        "category": "Writing Assistant",
        "officialUrl": "https://claude.ai",
        "firstSeenAt": "2023-07-11T00:00:00.000Z",
        "lastVerifiedAt": "2025-09-01T00:00:00.000Z",
        "mentionCount": 640,
        "trendScore": 88,
        "pricing": {
            "model": "freemium",
            "freeTier": {
                "exists": True,
                "limit": "Daily message limit",
                "watermark": False,
                "requiresSignup": True,
                "requiresCard": False,
                "commercialUse": True,
                "attribution": False,
            },
            "paidTier": {"startPrice": "$20/month", "billingOptions": ["monthly", "annual"]},
            "confidence": 0.95,
            "sourceUrl": "https://claude.ai/pricing",
            "lastCheckedAt": "2025-09-01T00:00:00.000Z",
        },
        "trust": {
            "overall": 88,
            "dataTraining": "opting-out",
            "dataRetention": "minimal",
            "countryOfOrigin": "USA",
            "privacyPolicyQuality": "excellent",
            "thirdPartySharing": False,
            "compliance": ["GDPR", "CCPA"],
            "concerns": [],
            "confidence": 0.9,
        },
    },
    {
        "id": "midjourney",
        "name": "Midjourney",
        "description": "Text-to-image generator known for artistic, high-quality renders.",
        "category": "Image Generation",
        "officialUrl": "https://www.midjourney.com",
        "firstSeenAt": "2022-07-12T00:00:00.000Z",
        "lastVerifiedAt": "2025-08-15T00:00:00.000Z",
        "mentionCount": 870,
        "trendScore": 55,
        "pricing": {
            "model": "paid",
            "freeTier": {"exists": False},
            "paidTier": {"startPrice": "$10/month", "billingOptions": ["monthly", "annual"]},
            "confidence": 0.9,
            "sourceUrl": "https://docs.midjourney.com/docs/plans",
            "lastCheckedAt": "2025-08-15T00:00:00.000Z",
        },
        "trust": {
            "overall": 78,
            "dataTraining": "explicit",
            "dataRetention": "permanent",
            "countryOfOrigin": "USA",
            "privacyPolicyQuality": "good",
            "thirdPartySharing": False,
            "compliance": ["GDPR"],
            "concerns": ["Images used for training", "Generations public by default"],
            "confidence": 0.85,
        },
    },
    {
        "id": "remove-bg",
        "name": "remove.bg",
        "description": "Removes image backgrounds automatically in a few seconds.",
        "category": "Image Editing",
        "officialUrl": "https://www.remove.bg",
        "firstSeenAt": "2023-02-20T00:00:00.000Z",
        "lastVerifiedAt": "2025-07-30T00:00:00.000Z",
        "mentionCount": 410,
        "trendScore": 40,
        "pricing": {
            "model": "freemium",
            "freeTier": {
                "exists": True,
                "limit": "Preview-resolution downloads",
                "watermark": False,
                "requiresSignup": False,
                "requiresCard": False,
                "commercialUse": True,
                "attribution": False,
            },
            "paidTier": {"startPrice": "$9/month", "billingOptions": ["monthly", "pay-as-you-go"]},
            "confidence": 0.85,
            "sourceUrl": "https://www.remove.bg/pricing",
            "lastCheckedAt": "2025-07-30T00:00:00.000Z",
        },
        "trust": {
            "overall": 80,
            "dataTraining": "no-training",
            "dataRetention": "minimal",
            "countryOfOrigin": "Austria",
            "privacyPolicyQuality": "good",
            "thirdPartySharing": False,
            "compliance": ["GDPR"],
            "concerns": [],
            "confidence": 0.8,
        },
    },
    {
        "id": "runway",
        "name": "Runway",
        "description": "Creative suite for text-to-video, image-to-video and AI-assisted video editing.",
        "category": "Video Editing",
        "officialUrl": "https://runwayml.com",
        "firstSeenAt": "2024-06-17T00:00:00.000Z",
        "lastVerifiedAt": "2025-09-10T00:00:00.000Z",
        "mentionCount": 530,
        "trendScore": 91,
        "pricing": {
            "model": "freemium",
            "freeTier": {
                "exists": True,
                "limit": "125 one-time credits",
                "watermark": True,
                "requiresSignup": True,
                "requiresCard": False,
                "commercialUse": False,
                "attribution": True,
            },
            "paidTier": {"startPrice": "$12/month", "billingOptions": ["monthly", "annual"]},
            "confidence": 0.9,
            "sourceUrl": "https://runwayml.com/pricing",
            "lastCheckedAt": "2025-09-10T00:00:00.000Z",
        },
        "trust": {
            "overall": 75,
            "dataTraining": "opting-out",
            "dataRetention": "permanent",
            "countryOfOrigin": "USA",
            "privacyPolicyQuality": "good",
            "thirdPartySharing": False,
            "compliance": ["GDPR"],
            "concerns": ["Generated content may be used for training"],
            "confidence": 0.8,
        },
    },
    {
        "id": "github-copilot",
        "name": "GitHub Copilot",
        "description": "AI pair programmer that suggests code and whole functions inside the editor.",
        "category": "Code Generation",
        "officialUrl": "https://github.com/features/copilot",
        "firstSeenAt": "2021-06-29T00:00:00.000Z",
        "lastVerifiedAt": "2025-09-05T00:00:00.000Z",
        "mentionCount": 760,
        "trendScore": 64,
        "pricing": {
            "model": "freemium",
            "freeTier": {
                "exists": True,
                "limit": "2,000 completions per month",
                "watermark": False,
                "requiresSignup": True,
                "requiresCard": False,
                "commercialUse": True,
                "attribution": False,
            },
            "paidTier": {"startPrice": "$10/month", "billingOptions": ["monthly", "annual"]},
            "confidence": 0.9,
            "sourceUrl": "https://github.com/features/copilot/plans",
            "lastCheckedAt": "2025-09-05T00:00:00.000Z",
        },
        "trust": {
            "overall": 82,
            "dataTraining": "opting-out",
            "dataRetention": "limited",
            "countryOfOrigin": "USA",
            "privacyPolicyQuality": "excellent",
            "thirdPartySharing": False,
            "compliance": ["GDPR", "CCPA"],
            "concerns": ["Suggestions may match public code"],
            "confidence": 0.85,
        },
    },
    {
        "id": "suno",
        "name": "Suno",
        "description": "Generates full songs with vocals from a text prompt.",
        "category": "Audio/Music",
        "officialUrl": "https://suno.com",
        "firstSeenAt": "2024-03-21T00:00:00.000Z",
        "lastVerifiedAt": "2025-08-20T00:00:00.000Z",
        "mentionCount": 350,
        "trendScore": 83,
        "pricing": {
            "model": "freemium",
            "freeTier": {
                "exists": True,
                "limit": "50 credits per day",
                "watermark": False,
                "requiresSignup": True,
                "requiresCard": False,
                "commercialUse": False,
                "attribution": True,
            },
            "paidTier": {"startPrice": "$10/month", "billingOptions": ["monthly", "annual"]},
            "confidence": 0.85,
            "sourceUrl": "https://suno.com/pricing",
            "lastCheckedAt": "2025-08-20T00:00:00.000Z",
        },
        "trust": {
            "overall": 62,
            "dataTraining": "unknown",
            "dataRetention": "permanent",
            "countryOfOrigin": "USA",
            "privacyPolicyQuality": "fair",
            "thirdPartySharing": True,
            "compliance": [],
            "concerns": ["Training data provenance unclear"],
            "confidence": 0.7,
        },
    },
    {
        "id": "elevenlabs",
        "name": "ElevenLabs",
        "description": "Realistic text-to-speech and voice cloning for narration and podcasts.",
        "category": "Audio/Music",
        "officialUrl": "https://elevenlabs.io",
        "firstSeenAt": "2023-01-23T00:00:00.000Z",
        "lastVerifiedAt": "2025-08-28T00:00:00.000Z",
        "mentionCount": 450,
        "trendScore": 70,
        "pricing": {
            "model": "freemium",
            "freeTier": {
                "exists": True,
                "limit": "10,000 characters per month",
                "watermark": False,
                "requiresSignup": True,
                "requiresCard": False,
                "commercialUse": False,
                "attribution": True,
            },
            "paidTier": {"startPrice": "$5/month", "billingOptions": ["monthly", "annual"]},
            "confidence": 0.9,
            "sourceUrl": "https://elevenlabs.io/pricing",
            "lastCheckedAt": "2025-08-28T00:00:00.000Z",
        },
        "trust": {
            "overall": 70,
            "dataTraining": "opting-out",
            "dataRetention": "limited",
            "countryOfOrigin": "USA",
            "privacyPolicyQuality": "good",
            "thirdPartySharing": False,
            "compliance": ["GDPR"],
            "concerns": ["Voice cloning misuse risk"],
            "confidence": 0.8,
        },
    },
    {
        "id": "spline-ai",
        "name": "Spline AI",
        "description": "Creates 3D objects, scenes and textures from text prompts in the browser.",
        "category": "3D/Design",
        "officialUrl": "https://spline.design/ai",
        "firstSeenAt": "2024-11-05T00:00:00.000Z",
        "lastVerifiedAt": "2025-07-12T00:00:00.000Z",
        "mentionCount": 120,
        "trendScore": 77,
        "pricing": {
            "model": "trial_only",
            "freeTier": {"exists": False},
            "paidTier": {"startPrice": "$9/month", "billingOptions": ["monthly", "annual"]},
            "confidence": 0.7,
            "sourceUrl": "https://spline.design/pricing",
            "lastCheckedAt": "2025-07-12T00:00:00.000Z",
        },
        "trust": {
            "overall": 58,
            "dataTraining": "unknown",
            "dataRetention": "unknown",
            "countryOfOrigin": "USA",
            "privacyPolicyQuality": "fair",
            "thirdPartySharing": False,
            "compliance": [],
            "concerns": ["AI data handling not described"],
            "confidence": 0.5,
        },
    },
    {
        "id": "notion-ai",
        "name": "Notion AI",
        "description": "Writing, summarizing and Q&A built into Notion workspaces.",
        "category": "Productivity",
        "officialUrl": "https://www.notion.so/product/ai",
        "firstSeenAt": "2023-02-22T00:00:00.000Z",
        "lastVerifiedAt": "2025-09-02T00:00:00.000Z",
        "mentionCount": 300,
        "trendScore": 45,
        "pricing": {
            "model": "paid",
            "freeTier": {
                "exists": True,
                "limit": "Limited trial responses",
                "watermark": False,
                "requiresSignup": True,
                "requiresCard": True,
                "commercialUse": True,
                "attribution": False,
            },
            "paidTier": {"startPrice": "$10/month", "billingOptions": ["monthly", "annual"]},
            "confidence": 0.8,
            "sourceUrl": "https://www.notion.so/pricing",
            "lastCheckedAt": "2025-09-02T00:00:00.000Z",
        },
        "trust": {
            "overall": 81,
            "dataTraining": "no-training",
            "dataRetention": "limited",
            "countryOfOrigin": "USA",
            "privacyPolicyQuality": "good",
            "thirdPartySharing": True,
            "compliance": ["GDPR", "CCPA", "SOC 2"],
            "concerns": ["Uses third-party model providers"],
            "confidence": 0.8,
        },
    },
    {
        "id": "craiyon",
        "name": "Craiyon",
        "description": "Free browser image generator, no account needed.",
        "category": "Image Generation",
        "officialUrl": "https://www.craiyon.com",
        "firstSeenAt": "2022-06-06T00:00:00.000Z",
        "lastVerifiedAt": "2025-06-18T00:00:00.000Z",
        "mentionCount": 210,
        "trendScore": 18,
        "pricing": {
            "model": "free",
            "freeTier": {
                "exists": True,
                "limit": "Unlimited with ads",
                "watermark": True,
                "requiresSignup": False,
                "requiresCard": False,
                "commercialUse": True,
                "attribution": True,
            },
            "paidTier": {"startPrice": "$5/month", "billingOptions": ["monthly", "annual"]},
            "confidence": 0.75,
            "sourceUrl": "https://www.craiyon.com/pricing",
            "lastCheckedAt": "2025-06-18T00:00:00.000Z",
        },
        "trust": {
            "overall": 55,
            "dataTraining": "explicit",
            "dataRetention": "permanent",
            "countryOfOrigin": "USA",
            "privacyPolicyQuality": "fair",
            "thirdPartySharing": True,
            "compliance": [],
            "concerns": ["Ad-supported", "Prompts stored indefinitely"],
            "confidence": 0.6,
        },
    },
]


def load_fallback_tools() -> List[Tool]:
    """Build fresh Tool models from the static dataset"""
    return [
        Tool.model_validate({k: v for k, v in entry.items() if k != "trust"})
        for entry in FALLBACK_TOOLS
    ]


def load_fallback_trust_scores() -> Dict[str, TrustScore]:
    return {
        entry["id"]: TrustScore.model_validate(entry["trust"])
        for entry in FALLBACK_TOOLS
        if entry.get("trust")
    }
