"""
Plain-language task search: map what the user wants to do onto tools.

Claude picks the tools when a client is configured; otherwise (or when the
reply cannot be used) simple keyword matching takes over.
"""

import logging
from typing import Any, Dict, List, Optional

import anthropic

from integrations.anthropic_client import DEFAULT_MODEL, complete
from schemas.domain import Tool
from utils.llm_json import LLMResponseError, extract_json

logger = logging.getLogger(__name__)

MAX_PROMPT_TOOLS = 50
MAX_KEYWORD_MATCHES = 10

TASK_SUGGESTIONS = [
    {"id": "remove-background", "text": "Remove background from product photo", "category": "Image Editing"},
    {"id": "podcast-voice", "text": "Make my voice sound like a podcast host", "category": "Audio/Music"},
    {"id": "sketch-to-image", "text": "Turn my sketch into a realistic image", "category": "Image Generation"},
    {"id": "ai-email", "text": "Write emails that don't sound like AI", "category": "Writing Assistant"},
    {"id": "video-from-scratch", "text": "Create a marketing video from scratch", "category": "Video Editing"},
    {"id": "code-assistant", "text": "Help me write better code", "category": "Code Generation"},
    {"id": "remove-watermark", "text": "Remove watermark from images", "category": "Image Editing"},
    {"id": "transcribe-audio", "text": "Transcribe audio to text", "category": "Audio/Music"},
]


def keyword_search(task: str, tools: List[Tool]) -> Dict[str, Any]:
    """Tools whose name, description or category contain any task word longer than 3 characters"""
    words = [word for word in task.lower().split() if len(word) > 3]
    matches = []
    for tool in tools:
        text = f"{tool.name} {tool.description} {tool.category.value}".lower()
        if any(word in text for word in words):
            matches.append(tool.id)

    return {
        "toolIds": matches[:MAX_KEYWORD_MATCHES],
        "reasoning": "Matched based on keywords",
        "method": "keyword",
    }


class TaskSearchService:
    def __init__(self, client: Optional[anthropic.Anthropic], model: str = DEFAULT_MODEL):
        self.client = client
        self.model = model

    def _build_prompt(self, task: str, tools: List[Tool]) -> str:
        tool_lines = "\n".join(
            f"- {t.name} ({t.id}): {t.description} [{t.category.value}]"
            for t in tools[:MAX_PROMPT_TOOLS]
        )
        return f"""A user wants to: "{task}"

Available AI Tools:
{tool_lines}

Find the most relevant tools for this task. Return ONLY valid JSON:
{{
  "toolIds": ["tool-id-1", "tool-id-2"],
  "reasoning": "Brief explanation of why these tools match"
}}

Select tools that best match the user's intent, even if not exact category matches."""

    def search(self, task: str, tools: List[Tool]) -> Dict[str, Any]:
        """Returns {toolIds, reasoning, method}; method is 'ai' or 'keyword'"""
        if self.client is None:
            return keyword_search(task, tools)

        try:
            reply = complete(self.client, self._build_prompt(task, tools), model=self.model, max_tokens=800)
            data = extract_json(reply)
        except (anthropic.APIError, LLMResponseError) as e:
            logger.warning(f"🔍 [TASK SEARCH] AI search unavailable, using keywords: {e}")
            return keyword_search(task, tools)

        known_ids = {tool.id for tool in tools}
        raw_ids = data.get("toolIds") or []
        if not isinstance(raw_ids, list):
            raw_ids = []
        tool_ids = [tid for tid in raw_ids if isinstance(tid, str) and tid in known_ids]
        if len(tool_ids) != len(raw_ids):
            logger.info(f"🔍 [TASK SEARCH] Dropped {len(raw_ids) - len(tool_ids)} unknown tool ids from model reply")

        return {
            "toolIds": list(dict.fromkeys(tool_ids)),
            "reasoning": data.get("reasoning") or "AI matched tools to your task",
            "method": "ai",
        }
