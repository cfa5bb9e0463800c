"""
Mention collection from AI subreddits.

Hot posts are read through Reddit's OAuth API; Claude extracts the tool a post
is about. Known tools get a mention record and a bumped mention count,
confidently identified unknown tools are queued for analysis.
"""

import logging
import time
from typing import Any, Dict, List, Optional

import anthropic
import requests

from data.tool_repository import ToolRepository
from integrations.anthropic_client import DEFAULT_MODEL, complete
from schemas.domain import Category, Mention, utc_now
from services.enrichment.pipeline import slugify
from utils.llm_json import LLMResponseError, extract_json

logger = logging.getLogger(__name__)

SUBREDDITS = [
    "artificialinteligence",
    "ChatGPT",
    "StableDiffusion",
    "MachineLearning",
    "ArtificialIntelligence",
    "OpenAI",
    "AITools",
]

MIN_CONFIDENCE = 0.5
USER_AGENT = "Findora/1.0"


class RedditClient:
    """Application-only OAuth client for listing subreddit posts"""

    TOKEN_URL = "https://www.reddit.com/api/v1/access_token"
    API_URL = "https://oauth.reddit.com"

    def __init__(self, client_id: str, client_secret: str, session: Optional[requests.Session] = None):
        if not client_id or not client_secret:
            raise ValueError("REDDIT_CLIENT_ID and REDDIT_CLIENT_SECRET are required")
        self.client_id = client_id
        self.client_secret = client_secret
        self.session = session or requests.Session()
        self._token: Optional[str] = None

    def authenticate(self) -> str:
        response = self.session.post(
            self.TOKEN_URL,
            auth=(self.client_id, self.client_secret),
            data={"grant_type": "client_credentials"},
            headers={"User-Agent": USER_AGENT},
            timeout=15,
        )
        if not response.ok:
            raise ConnectionError(f"Reddit auth failed: {response.status_code} {response.reason}")
        self._token = response.json()["access_token"]
        return self._token

    def hot_posts(self, subreddit: str, limit: int = 100) -> List[Dict[str, Any]]:
        if self._token is None:
            self.authenticate()
        response = self.session.get(
            f"{self.API_URL}/r/{subreddit}/hot",
            params={"limit": limit},
            headers={"Authorization": f"Bearer {self._token}", "User-Agent": USER_AGENT},
            timeout=15,
        )
        response.raise_for_status()
        return [child["data"] for child in response.json().get("data", {}).get("children", [])]


class MentionCollector:
    def __init__(
        self,
        repository: ToolRepository,
        reddit: RedditClient,
        llm_client: anthropic.Anthropic,
        model: str = DEFAULT_MODEL,
        delay_seconds: float = 1.0,
    ):
        self.repository = repository
        self.reddit = reddit
        self.llm_client = llm_client
        self.model = model
        self.delay_seconds = delay_seconds

    def fetch_posts(self, subreddits: List[str] = SUBREDDITS) -> List[Dict[str, Any]]:
        posts = []
        for subreddit in subreddits:
            try:
                batch = self.reddit.hot_posts(subreddit)
            except requests.RequestException as e:
                logger.warning(f"⚠️  [REDDIT] Failed to fetch r/{subreddit}: {e}")
                continue
            logger.info(f"📡 [REDDIT] Got {len(batch)} posts from r/{subreddit}")
            posts.extend(batch)
            time.sleep(self.delay_seconds)
        return posts

    def extract_tool(self, post: Dict[str, Any]) -> Dict[str, Any]:
        """{toolUrl, toolName, category, confidence}; nulls and zero confidence when nothing usable"""
        empty = {"toolUrl": None, "toolName": None, "category": None, "confidence": 0}
        categories = " | ".join(f'"{c.value}"' for c in Category)
        prompt = f"""Analyze this Reddit post and extract the official website URL of any AI tool mentioned:

Title: {post.get('title', '')}
Text: {(post.get('selftext') or '')[:2000]}
URL: {post.get('url') or ''}

Return ONLY valid JSON:
{{
  "toolUrl": "official website URL or null",
  "toolName": "tool name or null",
  "category": {categories} | null,
  "confidence": 0.0-1.0
}}

Rules:
- toolUrl should be the official website, not reddit, youtube, twitter, etc.
- Only return a URL if you're confident it's the tool's official site
- Return null if no clear tool or URL is found"""

        try:
            data = extract_json(complete(self.llm_client, prompt, model=self.model, max_tokens=300, temperature=0.0))
        except (anthropic.APIError, LLMResponseError) as e:
            logger.warning(f"⚠️  [REDDIT] Could not extract tool from post: {e}")
            return empty

        try:
            confidence = float(data.get("confidence") or 0)
        except (TypeError, ValueError):
            confidence = 0.0
        category = data.get("category")
        return {
            "toolUrl": data.get("toolUrl") or None,
            "toolName": data.get("toolName") or None,
            "category": category if category in {c.value for c in Category} else None,
            "confidence": confidence,
        }

    def collect(self, max_posts: int = 50) -> Dict[str, int]:
        stats = {"posts": 0, "mentions": 0, "queued": 0, "skipped": 0}
        queued_urls = set()

        for post in self.fetch_posts()[:max_posts]:
            stats["posts"] += 1
            extracted = self.extract_tool(post)
            url, name = extracted["toolUrl"], extracted["toolName"]

            if not url or extracted["confidence"] <= MIN_CONFIDENCE:
                stats["skipped"] += 1
                continue

            tool = self.repository.find_tool_by_url(url)
            if tool is None and name:
                tool = self.repository.get_tool(slugify(name))

            if tool is not None:
                self.repository.add_mention(Mention(
                    tool_id=tool.id,
                    url=f"https://www.reddit.com{post.get('permalink', '')}",
                    title=post.get("title", ""),
                    mentioned_at=post.get("created_utc") or utc_now(),
                ))
                self.repository.increment_mention_count(tool.id)
                stats["mentions"] += 1
                logger.info(f"📣 [REDDIT] Mention of {tool.name}")
            elif url not in queued_urls:
                queued_urls.add(url)
                self.repository.create_job(url, tool_name=name, category=extracted["category"])
                stats["queued"] += 1
                logger.info(f"🆕 [REDDIT] Queued unknown tool {name or url} (confidence {extracted['confidence']:.2f})")

            time.sleep(self.delay_seconds)

        logger.info(f"📊 [REDDIT] Collection complete: {stats}")
        return stats
