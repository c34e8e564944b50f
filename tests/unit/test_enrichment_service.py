"""
Unit tests for the web enrichment pipeline.

Tests EnrichmentService including:
- Term splitting and search order (diseases, conditions, allergies)
- Allergy query suffix
- Per-term failure isolation and counters
- Corpus formatting and persistence
"""
from food_analyzer.schemas import ConditionLists, ConditionSearchResult, WebResult
from food_analyzer.services.enrichment_service import (
    EnrichmentService,
    format_corpus_entry,
    split_terms,
    summarize,
)
from tests.factories import create_hits


class TestSplitTerms:
    def test_trims_and_drops_empty(self):
        assert split_terms(" diabetes , ,gout,") == ["diabetes", "gout"]

    def test_blank(self):
        assert split_terms("   ") == []
        assert split_terms(None) == []


class TestEnrich:
    """Tests for EnrichmentService.enrich()."""

    def test_search_order_and_allergy_suffix(self, enrichment_service, mock_search_client):
        conditions = ConditionLists(allergy="peanut", disease="diabetes, gout", other="pregnancy")

        record = enrichment_service.enrich(conditions)

        assert [(r.condition, r.category) for r in record.search_results] == [
            ("diabetes", "disease"),
            ("gout", "disease"),
            ("pregnancy", "condition"),
            ("peanut", "allergy"),
        ]
        primary_queries = [q for q in mock_search_client.queries if q.startswith("food prohibited in")]
        assert primary_queries == [
            "food prohibited in diabetes",
            "food prohibited in gout",
            "food prohibited in pregnancy",
            "food prohibited in peanut allergy",
        ]

    def test_no_terms_yields_empty_record(self, enrichment_service, mock_search_client):
        record = enrichment_service.enrich(ConditionLists())

        assert record.success is True
        assert record.total_conditions == 0
        assert record.successful_searches == 0
        assert record.total_content == ""
        assert mock_search_client.queries == []

    def test_failing_term_does_not_abort_others(self, enrichment_service, mock_search_client):
        mock_search_client.failing_queries.add("food prohibited in gout")
        mock_search_client.responses["food prohibited in diabetes"] = create_hits(
            "https://a.com/1", "https://b.com/2", "https://c.com/3"
        )

        record = enrichment_service.enrich(ConditionLists(disease="gout, diabetes"))

        assert record.success is True
        assert record.total_conditions == 2
        assert record.successful_searches == 1
        gout, diabetes = record.search_results
        assert gout.status == "error"
        assert gout.results == []
        assert diabetes.status == "success"
        assert len(diabetes.results) == 3
        assert "Current disease: gout" not in record.total_content
        assert "Current disease: diabetes" in record.total_content

    def test_alternative_query_failure_keeps_partial_results(self, enrichment_service, mock_search_client):
        mock_search_client.responses["food prohibited in gout"] = create_hits("https://example.com/a")
        mock_search_client.failing_queries.add("foods to avoid with gout")

        record = enrichment_service.enrich(ConditionLists(disease="gout"))

        entry = record.search_results[0]
        assert entry.status == "success"
        assert [r.url for r in entry.results] == ["https://example.com/a"]
        assert record.successful_searches == 1

    def test_malformed_link_does_not_abort_other_terms(self, enrichment_service, mock_search_client):
        mock_search_client.responses["food prohibited in diabetes"] = create_hits(
            "http://[bad", "https://example.com/a"
        )

        record = enrichment_service.enrich(ConditionLists(disease="diabetes, gout"))

        assert [(r.condition, r.status) for r in record.search_results] == [
            ("diabetes", "success"),
            ("gout", "success"),
        ]
        assert [r.url for r in record.search_results[0].results] == ["https://example.com/a"]

    def test_success_with_no_pages_counts_as_success(self, enrichment_service):
        record = enrichment_service.enrich(ConditionLists(other="insomnia"))

        assert record.search_results[0].status == "success"
        assert record.successful_searches == 1
        assert record.total_content == "Current condition: insomnia\n\n"

    def test_results_per_condition_respected(self, enrichment_service, mock_search_client):
        mock_search_client.responses["food prohibited in celiac"] = create_hits(
            "https://a.com/1", "https://b.com/2", "https://c.com/3", "https://d.com/4"
        )

        record = enrichment_service.enrich(ConditionLists(disease="celiac"))

        assert len(record.search_results[0].results) == 3

    def test_persists_when_user_given(self, enrichment_service, repository, mock_search_client):
        mock_search_client.responses["food prohibited in gout"] = create_hits("https://a.com/1")

        record = enrichment_service.enrich(ConditionLists(disease="gout"), user_id="user@example.com")

        saved = repository.load_enrichment("user@example.com")
        assert saved is not None
        assert saved.total_content == record.total_content
        assert saved.search_results[0].category == "disease"

    def test_new_run_replaces_previous_record(self, enrichment_service, repository):
        enrichment_service.enrich(ConditionLists(disease="gout"), user_id="user@example.com")
        enrichment_service.enrich(ConditionLists(allergy="shellfish"), user_id="user@example.com")

        saved = repository.load_enrichment("user@example.com")
        assert [r.condition for r in saved.search_results] == ["shellfish"]

    def test_not_persisted_without_user(self, search_service, repository):
        service = EnrichmentService(search_service, repository, results_per_condition=3)

        service.enrich(ConditionLists(disease="gout"))

        assert repository.load_enrichment("user@example.com") is None


class TestCorpusFormatting:
    def test_entry_layout(self):
        entry = ConditionSearchResult(
            condition="gout",
            category="disease",
            results=[
                WebResult(url="https://a.com", title="Gout diet", description="Avoid purines", content="Red meat")
            ],
        )

        assert format_corpus_entry(entry) == (
            "Current disease: gout\n\n"
            "Title: Gout diet\n"
            "URL: https://a.com\n"
            "Description: Avoid purines\n"
            "Content: Red meat\n\n"
        )


class TestSummarize:
    def test_missing_record(self):
        assert summarize(None) == ["No saved search results found"]

    def test_lists_each_condition(self, enrichment_service):
        record = enrichment_service.enrich(ConditionLists(disease="gout", allergy="soy"))

        lines = summarize(record)

        assert "Total conditions: 2, Successful: 2" in lines
        assert lines[-1].startswith("Condition 2: soy (allergy) - success")
