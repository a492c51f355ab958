"""
Pytest configuration and shared fixtures

Provides keyword factories, mocked HTTP transports and mocked motor
collections for all test modules.
"""

from typing import Any, Callable, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from app.models.seo import AggregatedResult, KeywordRecord, PageRecord


# ============================================================================
# Record factories
# ============================================================================

@pytest.fixture
def make_keyword() -> Callable[..., KeywordRecord]:
    """Build a KeywordRecord with sensible defaults."""

    def _make(keyword: str = "seo tools", position: float = 5, **fields: Any) -> KeywordRecord:
        return KeywordRecord(keyword=keyword, position=position, **fields)

    return _make


@pytest.fixture
def make_pages() -> Callable[[int], List[PageRecord]]:
    def _make(count: int) -> List[PageRecord]:
        return [
            PageRecord(url=f"https://example.com/page-{i}", clicks=count - i, impressions=10 * (count - i))
            for i in range(count)
        ]

    return _make


@pytest.fixture
def gsc_result() -> Callable[..., AggregatedResult]:
    def _make(**fields: Any) -> AggregatedResult:
        return AggregatedResult(source="search_console", website="example.com", **fields)

    return _make


# ============================================================================
# HTTP
# ============================================================================

@pytest.fixture
def mock_http() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """AsyncClient whose requests are answered by the given handler."""

    def _client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _client


# ============================================================================
# MongoDB
# ============================================================================

def make_collection(rows: Optional[List[Dict[str, Any]]] = None) -> MagicMock:
    """A motor collection double; find() cursors support sort() and to_list()."""
    collection = MagicMock()

    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.to_list = AsyncMock(return_value=rows or [])
    collection.find.return_value = cursor

    aggregate_cursor = MagicMock()
    aggregate_cursor.to_list = AsyncMock(return_value=[])
    collection.aggregate.return_value = aggregate_cursor

    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.update_one = AsyncMock(return_value=MagicMock(matched_count=1))
    collection.update_many = AsyncMock()
    collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
    collection.count_documents = AsyncMock(return_value=0)
    collection.distinct = AsyncMock(return_value=[])
    return collection


@pytest.fixture
def mongo():
    """
    A database double; `db[name]` returns the same collection mock per name.

    Returns (db, collections) so tests can configure and inspect calls.
    """
    collections: Dict[str, MagicMock] = {}
    db = MagicMock()
    db.__getitem__.side_effect = lambda name: collections.setdefault(name, make_collection())
    return db, collections
