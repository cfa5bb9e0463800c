"""Anthropic API client factory"""

import logging
from typing import Optional

import anthropic

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-3-haiku-20240307"


def create_anthropic_client(api_key: Optional[str]) -> Optional[anthropic.Anthropic]:
    """Create an Anthropic client, or None when no key is configured"""
    if not api_key:
        logger.warning("⚠️  ANTHROPIC_API_KEY not configured - AI features disabled")
        return None

    try:
        return anthropic.Anthropic(api_key=api_key)
    except Exception as e:
        logger.error(f"Failed to initialize Anthropic client: {e}")
        return None


def extract_text(response) -> str:
    """Concatenate the text blocks of a Messages API response"""
    parts = []
    for block in getattr(response, "content", None) or []:
        text = getattr(block, "text", None)
        if text:
            parts.append(text)
    return "".join(parts)


def complete(
    client: anthropic.Anthropic,
    prompt: str,
    model: str = DEFAULT_MODEL,
    max_tokens: int = 1500,
    temperature: float = 0.2,
    system: Optional[str] = None,
) -> str:
    """Single-turn completion returning the reply text"""
    kwargs = {
        "model": model,
        "max_tokens": max_tokens,
        "temperature": temperature,
        "messages": [{"role": "user", "content": prompt}],
    }
    if system:
        kwargs["system"] = system
    response = client.messages.create(**kwargs)
    return extract_text(response)
