"""Test fixtures for the food analyzer."""

from tests.fixtures.mocks import (
    FailingKeyValueStore,
    MockClaudeService,
    MockPageFetcher,
    MockSearchClient,
)

__all__ = [
    "FailingKeyValueStore",
    "MockClaudeService",
    "MockPageFetcher",
    "MockSearchClient",
]
