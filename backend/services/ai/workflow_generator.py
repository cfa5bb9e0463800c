"""Multi-step workflow generation from a user goal"""

import logging
from typing import Any, Dict, List, Optional

import anthropic

from integrations.anthropic_client import DEFAULT_MODEL, complete
from schemas.domain import Tool
from utils.errors import ExternalServiceError, FeatureDisabledError
from utils.llm_json import LLMResponseError, extract_json

logger = logging.getLogger(__name__)

MAX_WORKFLOW_TOOLS = 100


def describe_tool_pricing(tool: Tool) -> str:
    pricing = tool.pricing
    free_tier = pricing.free_tier
    free_line = f"Yes - {free_tier.limit or 'Available'}" if free_tier.exists else "No"
    return (
        f"- {tool.name} ({tool.id}): {tool.description} [{tool.category.value}]\n"
        f"  Pricing: {pricing.model.value}\n"
        f"  Free Tier: {free_line}\n"
        f"  {'⚠️ Has watermark' if free_tier.watermark else '✓ No watermark'}\n"
        f"  {'⚠️ Card required' if free_tier.requires_card else '✓ No card required'}\n"
        f"  {'✓ Commercial use allowed' if free_tier.commercial_use else '❌ No commercial use'}\n"
        f"  Paid: {pricing.paid_tier.start_price or 'N/A'}"
    )


def fallback_workflow(goal: str) -> Dict[str, Any]:
    return {
        "steps": [
            {
                "stepNumber": 1,
                "name": "Planning",
                "description": "Plan your approach based on the goal",
                "recommendedTool": {
                    "name": "ChatGPT",
                    "toolId": "chatgpt",
                    "reason": "Good for planning and brainstorming",
                },
                "pricing": {
                    "cost": "$0",
                    "freeTierAvailable": True,
                    "notes": "Free tier available",
                },
            }
        ],
        "estimatedTime": "1-2 hours",
        "totalCost": "$0",
        "summary": f"Workflow for: {goal}",
    }


class WorkflowGenerator:
    def __init__(self, client: Optional[anthropic.Anthropic], model: str = DEFAULT_MODEL):
        self.client = client
        self.model = model

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def _build_prompt(self, goal: str, tools: List[Tool]) -> str:
        tools_detail = "\n\n".join(describe_tool_pricing(t) for t in tools[:MAX_WORKFLOW_TOOLS])
        return f"""You are an AI workflow generator for an AI tool discovery platform.

User Goal: "{goal}"

Available Tools with Pricing Transparency:
{tools_detail}

Generate a step-by-step workflow to accomplish the user's goal using the available AI tools.

IMPORTANT: Prioritize tools with:
- No credit card required for free tier
- No watermark on free outputs
- Commercial use allowed
- Lower cost options

Return your response as JSON in this format:
{{
  "steps": [
    {{
      "stepNumber": 1,
      "name": "Step name",
      "description": "What to do in this step",
      "recommendedTool": {{
        "name": "Tool name",
        "toolId": "tool-id",
        "reason": "Why this tool (mention pricing benefits like 'no card required', 'no watermark')"
      }},
      "pricing": {{
        "cost": "$0",
        "freeTierAvailable": true,
        "notes": "No card required, no watermark, commercial use OK"
      }},
      "estimatedTime": "30 minutes"
    }}
  ],
  "estimatedTime": "2-3 hours",
  "totalCost": "$0",
  "summary": "Brief summary emphasizing cost savings and transparency benefits"
}}"""

    def generate(self, goal: str, tools: List[Tool]) -> Dict[str, Any]:
        """
        Build a workflow for the goal from the given tools.

        Raises FeatureDisabledError without a Claude client and
        ExternalServiceError when the API call fails. An unusable reply
        yields a single-step fallback workflow.
        """
        if not self.enabled:
            raise FeatureDisabledError("Workflow generator")

        try:
            reply = complete(self.client, self._build_prompt(goal, tools), model=self.model, max_tokens=2500)
        except anthropic.APIError as e:
            logger.error(f"🛠️ [WORKFLOW] Claude request failed: {e}")
            raise ExternalServiceError("Claude", "Workflow generation failed") from e

        try:
            workflow = extract_json(reply)
        except LLMResponseError as e:
            logger.warning(f"🛠️ [WORKFLOW] Unparseable workflow reply, using fallback: {e}")
            return fallback_workflow(goal)

        if not isinstance(workflow.get("steps"), list) or not workflow["steps"]:
            logger.warning("🛠️ [WORKFLOW] Workflow reply has no steps, using fallback")
            return fallback_workflow(goal)

        workflow.setdefault("estimatedTime", "Unknown")
        workflow.setdefault("totalCost", "Unknown")
        workflow.setdefault("summary", f"Workflow for: {goal}")
        logger.info(f"🛠️ [WORKFLOW] Generated {len(workflow['steps'])} steps for goal: {goal[:60]}")
        return workflow
