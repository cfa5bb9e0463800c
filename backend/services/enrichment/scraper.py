"""
Tool website scraper.

Fetches the homepage plus the first pricing-looking and FAQ-looking pages it
links to, and reduces each to whitespace-collapsed visible text.
"""

import logging
import re
import urllib.parse
from typing import Iterable, Optional

import httpx
from bs4 import BeautifulSoup

from schemas.domain import ScrapedSite

logger = logging.getLogger(__name__)

HOMEPAGE_LIMIT = 10000
PRICING_LIMIT = 10000
FAQ_LIMIT = 5000

PRICING_LINK_KEYWORDS = ("pricing", "price", "plan")
FAQ_LINK_KEYWORDS = ("faq", "help")

USER_AGENT = "Mozilla/5.0 (compatible; FindoraBot/1.0; +https://findora.ai)"


class ScrapeError(Exception):
    """The homepage could not be fetched"""
    pass


def visible_text(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    root = soup.body or soup
    return re.sub(r"\s+", " ", root.get_text(" ")).strip()


def find_link(html: str, base_url: str, keywords: Iterable[str]) -> Optional[str]:
    """Absolute URL of the first anchor whose href contains one of the keywords"""
    soup = BeautifulSoup(html, "html.parser")
    for anchor in soup.select("a[href]"):
        href = anchor["href"]
        if any(keyword in href.lower() for keyword in keywords):
            return urllib.parse.urljoin(base_url, href).split("#")[0]
    return None


def _fetch(client: httpx.Client, url: str) -> str:
    response = client.get(url)
    response.raise_for_status()
    return response.text


def _fetch_linked_text(client: httpx.Client, url: Optional[str], label: str) -> Optional[str]:
    if not url:
        return None
    logger.info(f"📄 [SCRAPER] Found {label} page: {url}")
    try:
        return visible_text(_fetch(client, url))
    except httpx.HTTPError as e:
        logger.warning(f"⚠️  [SCRAPER] Could not fetch {label} page {url}: {e}")
        return None


def scrape_tool_website(url: str, client: Optional[httpx.Client] = None, timeout: float = 30.0) -> ScrapedSite:
    """Scrape homepage, pricing and FAQ text; pricing text falls back to the homepage"""
    logger.info(f"🌐 [SCRAPER] Scraping {url}")

    owns_client = client is None
    if owns_client:
        client = httpx.Client(timeout=timeout, follow_redirects=True, headers={"User-Agent": USER_AGENT})

    try:
        try:
            html = _fetch(client, url)
        except httpx.HTTPError as e:
            logger.error(f"❌ [SCRAPER] Error scraping {url}: {e}")
            raise ScrapeError(f"Failed to fetch {url}: {e}") from e

        homepage_text = visible_text(html)
        pricing_text = _fetch_linked_text(client, find_link(html, url, PRICING_LINK_KEYWORDS), "pricing")
        faq_text = _fetch_linked_text(client, find_link(html, url, FAQ_LINK_KEYWORDS), "FAQ")
    finally:
        if owns_client:
            client.close()

    return ScrapedSite(
        homepage_text=homepage_text[:HOMEPAGE_LIMIT],
        pricing_text=(pricing_text if pricing_text is not None else homepage_text)[:PRICING_LIMIT],
        faq_text=(faq_text or "")[:FAQ_LIMIT],
    )
