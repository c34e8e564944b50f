"""
Web enrichment for a user's health terms.

Runs one condition search per term, sequentially, and assembles the corpus the
health analysis prompt consumes. Each run fully replaces the user's previous
record; a failing term is recorded with status "error" and never aborts its
siblings.
"""

import logging
from typing import Optional

from food_analyzer.config import settings
from food_analyzer.exceptions import PartialEnrichmentError, SearchBackendError
from food_analyzer.schemas import (
    ConditionCategory,
    ConditionLists,
    ConditionSearchResult,
    EnrichmentRecord,
    WebResult,
)
from food_analyzer.services.profile_repository import ProfileRepository
from food_analyzer.services.search_service import ConditionSearchService

logger = logging.getLogger(__name__)

ALLERGY_SUFFIX = " allergy"


def split_terms(text: Optional[str]) -> list[str]:
    """Split a comma-separated condition list into trimmed, non-empty terms."""
    if not text or not text.strip():
        return []
    return [term.strip() for term in text.split(",") if term.strip()]


def format_corpus_entry(entry: ConditionSearchResult) -> str:
    lines = [f"Current {entry.category}: {entry.condition}\n\n"]
    for result in entry.results:
        lines.append(
            f"Title: {result.title}\n"
            f"URL: {result.url}\n"
            f"Description: {result.description}\n"
            f"Content: {result.content}\n\n"
        )
    return "".join(lines)


class EnrichmentService:
    """Builds and caches the per-user web enrichment record."""

    def __init__(
        self,
        search_service: Optional[ConditionSearchService] = None,
        repository: Optional[ProfileRepository] = None,
        results_per_condition: Optional[int] = None,
    ):
        self.search_service = search_service or ConditionSearchService()
        self.repository = repository
        self.results_per_condition = (
            results_per_condition
            if results_per_condition is not None
            else settings.results_per_condition
        )

    def enrich(self, conditions: ConditionLists, user_id: Optional[str] = None) -> EnrichmentRecord:
        """
        Search every term and build the enrichment record.

        Terms run in this order: diseases, other conditions, then allergies.
        When user_id is given and a repository is configured, the record
        overwrites the user's cached one.
        """
        plan: list[tuple[ConditionCategory, str, str]] = []
        for term in split_terms(conditions.disease):
            plan.append(("disease", term, term))
        for term in split_terms(conditions.other):
            plan.append(("condition", term, term))
        for term in split_terms(conditions.allergy):
            plan.append(("allergy", term, term + ALLERGY_SUFFIX))

        search_results: list[ConditionSearchResult] = []
        total_content = ""

        for category, term, phrase in plan:
            try:
                results = self._search_term(category, term, phrase)
            except PartialEnrichmentError as e:
                logger.warning("%s", e)
                search_results.append(
                    ConditionSearchResult(condition=term, category=category, results=[], status="error")
                )
                continue

            entry = ConditionSearchResult(
                condition=term, category=category, results=results, status="success"
            )
            search_results.append(entry)
            total_content += format_corpus_entry(entry)

        record = EnrichmentRecord(
            success=True,
            total_content=total_content,
            search_results=search_results,
            total_conditions=len(search_results),
            successful_searches=sum(1 for r in search_results if r.status == "success"),
        )

        logger.info(
            "Enrichment finished: %d/%d searches succeeded",
            record.successful_searches,
            record.total_conditions,
        )

        if user_id is not None and self.repository is not None:
            self.repository.save_enrichment(user_id, record)

        return record

    def _search_term(self, category: ConditionCategory, term: str, phrase: str) -> list[WebResult]:
        try:
            return self.search_service.search_condition(phrase, self.results_per_condition)
        except SearchBackendError as e:
            raise PartialEnrichmentError(term, category, e) from e


def summarize(record: Optional[EnrichmentRecord]) -> list[str]:
    """Debug summary lines for a cached enrichment record."""
    if record is None:
        return ["No saved search results found"]

    lines = [
        "Search Results Summary:",
        f"Total conditions: {record.total_conditions}, Successful: {record.successful_searches}",
        f"Timestamp: {record.timestamp.isoformat()}",
    ]
    for index, result in enumerate(record.search_results, 1):
        lines.append(
            f"Condition {index}: {result.condition} ({result.category}) - {result.status}"
            f" [{len(result.results)} pages]"
        )
    return lines
