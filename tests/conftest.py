"""
Test configuration and fixtures for the food analyzer.

- In-memory SQLite engine shared by every session of a test (StaticPool)
- Key-value store, repository and service fixtures wired to mocks
- Mock collaborators for the AI service, search backend and page fetches
"""

from typing import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from food_analyzer.database import Base
from food_analyzer.services.enrichment_service import EnrichmentService
from food_analyzer.services.kv_store import SQLKeyValueStore
from food_analyzer.services.profile_repository import ProfileRepository
from food_analyzer.services.profile_service import ProfileService
from food_analyzer.services.search_service import ConditionSearchService
from tests.fixtures.mocks import MockClaudeService, MockPageFetcher, MockSearchClient


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def test_engine():
    """Fresh in-memory database per test."""
    import food_analyzer.models  # noqa: F401

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture
def kv_store(session_factory) -> SQLKeyValueStore:
    return SQLKeyValueStore(session_factory)


@pytest.fixture
def repository(kv_store) -> ProfileRepository:
    return ProfileRepository(kv_store)


# =============================================================================
# Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_claude_service() -> MockClaudeService:
    return MockClaudeService()


@pytest.fixture
def mock_search_client() -> MockSearchClient:
    return MockSearchClient()


@pytest.fixture
def mock_page_fetcher() -> MockPageFetcher:
    return MockPageFetcher()


@pytest.fixture
def search_service(mock_search_client, mock_page_fetcher) -> ConditionSearchService:
    return ConditionSearchService(
        search_client=mock_search_client,
        page_fetcher=mock_page_fetcher,
        result_count=10,
    )


@pytest.fixture
def enrichment_service(search_service, repository) -> EnrichmentService:
    return EnrichmentService(search_service, repository, results_per_condition=3)


@pytest.fixture
def profile_service(repository, enrichment_service) -> Generator[ProfileService, None, None]:
    yield ProfileService(repository, enrichment_service)
