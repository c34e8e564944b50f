"""Fetch result pages and reduce them to plain text for the enrichment corpus."""

import logging
import re
from typing import Optional

import requests

from food_analyzer.config import settings
from food_analyzer.exceptions import PageFetchError

logger = logging.getLogger(__name__)

# Script/style blocks go first, otherwise their bodies survive tag stripping
_SCRIPT_RE = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_STYLE_RE = re.compile(r"<style\b[^>]*>.*?</style\s*>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")

_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
)


def sanitize(html: str) -> str:
    """Strip scripts, styles and tags from HTML and decode the common entities."""
    text = _SCRIPT_RE.sub("", html or "")
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    text = _WHITESPACE_RE.sub(" ", text)
    for entity, replacement in _ENTITIES:
        text = text.replace(entity, replacement)
    return text.strip()


class PageFetcher:
    """Plain HTTP GET of a result page, returning sanitized text."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: Optional[int] = None):
        self.timeout = timeout if timeout is not None else settings.page_fetch_timeout
        self.session = session or requests.Session()

        # Use a realistic browser User-Agent
        self.session.headers.update(
            {
                "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36",
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                "Accept-Language": "en-US,en;q=0.5",
            }
        )

    def fetch(self, url: str) -> str:
        """
        Fetch a page and sanitize its body.

        Raises:
            PageFetchError: Transport failure or non-success status
        """
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.warning("Error fetching content from %s: %s", url, e)
            raise PageFetchError(f"Error fetching content from {url}: {e}") from e

        return sanitize(response.text)
