"""
Web search for one health term.

Each term gets up to ``max_results`` pages from distinct domains. A primary
query runs first; if it does not yield enough acceptable pages a broader query
runs with the same accumulator, so domains taken in the first pass stay taken.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlparse

import requests

from food_analyzer.config import settings
from food_analyzer.exceptions import PageFetchError, SearchBackendError
from food_analyzer.schemas import WebResult
from food_analyzer.services.page_fetcher import PageFetcher

logger = logging.getLogger(__name__)

EXCLUDED_DOMAINS = ("youtube.com", "arxiv.org", "quora.com", "github.com")
EXCLUDED_EXTENSIONS = (".pdf",)

PRIMARY_QUERY = "food prohibited in {term}"
ALTERNATIVE_QUERY = "foods to avoid with {term}"


@dataclass
class OrganicResult:
    """One ranked hit from the search backend."""

    link: str
    title: Optional[str] = None
    snippet: Optional[str] = None


class SerpApiClient:
    """Google results through SerpAPI's JSON endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[int] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.serpapi_api_key
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else settings.search_timeout

    def search(self, query: str, result_count: int = 10) -> list[OrganicResult]:
        """
        Run one query and return organic results in rank order.

        Raises:
            SearchBackendError: Transport failure, non-success status or error payload
        """
        params = {
            "engine": "google",
            "q": query,
            "api_key": self.api_key,
            "num": result_count,
        }
        try:
            response = self.session.get(settings.serpapi_url, params=params, timeout=self.timeout)
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise SearchBackendError(f"Search request failed: {e}") from e

        if not response.ok or (isinstance(data, dict) and data.get("error")):
            message = data.get("error") if isinstance(data, dict) else None
            raise SearchBackendError(
                f"Search backend error ({response.status_code}): {message or 'Invalid API key'}"
            )

        return [
            OrganicResult(
                link=item.get("link") or "",
                title=item.get("title"),
                snippet=item.get("snippet"),
            )
            for item in data.get("organic_results") or []
        ]


def registrable_domain(url: str) -> Optional[str]:
    """Hostname with a leading ``www.`` removed, or None if the URL has no usable host."""
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return None
    if not hostname:
        return None
    if hostname.startswith("www."):
        hostname = hostname[len("www."):]
    return hostname


def is_excluded(url: str, domain: str) -> bool:
    if any(excluded in domain for excluded in EXCLUDED_DOMAINS):
        return True
    path = urlparse(url).path.lower()
    return any(path.endswith(ext) for ext in EXCLUDED_EXTENSIONS)


@dataclass
class SearchAccumulator:
    """Accepted pages and their domains, threaded through both search passes."""

    max_results: int
    domains: set[str] = field(default_factory=set)
    results: list[WebResult] = field(default_factory=list)

    @property
    def full(self) -> bool:
        return len(self.results) >= self.max_results

    def accept(self, domain: str, result: WebResult) -> None:
        self.domains.add(domain)
        self.results.append(result)


class ConditionSearchService:
    """Finds and fetches pages about foods to avoid for one health term."""

    def __init__(
        self,
        search_client: Optional[SerpApiClient] = None,
        page_fetcher: Optional[PageFetcher] = None,
        result_count: Optional[int] = None,
    ):
        self.search_client = search_client or SerpApiClient()
        self.page_fetcher = page_fetcher or PageFetcher()
        self.result_count = result_count if result_count is not None else settings.search_result_count

    def search_condition(self, term: str, max_results: int = 3) -> list[WebResult]:
        """
        Collect up to max_results pages from distinct, non-excluded domains.

        Raises:
            SearchBackendError: The primary search request failed
        """
        accumulator = SearchAccumulator(max_results=max_results)

        self._run_pass(PRIMARY_QUERY.format(term=term), accumulator)
        if not accumulator.full:
            logger.info(
                "Only %d/%d results for '%s', trying alternative query",
                len(accumulator.results),
                max_results,
                term,
            )
            try:
                self._run_pass(ALTERNATIVE_QUERY.format(term=term), accumulator)
            except SearchBackendError as e:
                # Keep whatever the primary query already collected
                logger.warning("Alternative search failed for '%s': %s", term, e)

        return accumulator.results

    def _run_pass(self, query: str, accumulator: SearchAccumulator) -> None:
        hits = self.search_client.search(query, self.result_count)

        for hit in hits:
            if accumulator.full:
                break
            if not hit.link:
                continue

            domain = registrable_domain(hit.link)
            if not domain or is_excluded(hit.link, domain) or domain in accumulator.domains:
                continue

            try:
                content = self.page_fetcher.fetch(hit.link)
            except PageFetchError:
                # Skip the page; its domain may still be served by a later hit
                continue

            accumulator.accept(
                domain,
                WebResult(
                    url=hit.link,
                    title=hit.title or "No title available",
                    description=hit.snippet or "No description available",
                    content=content,
                ),
            )
