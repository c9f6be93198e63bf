from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from assignment import Owner  # noqa: E402
from notion_store import UpstreamQueryError  # noqa: E402


class FakeStore:
    """In-memory stand-in for NotionStore."""

    owner_property = 'Assigned To'

    def __init__(self, owner_ids=(), error: Exception | None = None, configured: bool = True) -> None:
        self.items = [{'owner_id': oid} for oid in owner_ids]
        self.error = error
        self.configured = configured
        self.created: list[dict] = []
        self.queries = 0
        self.database = {'properties': {'Issue Title': {}, 'Category': {}, 'Status': {}}}

    def query_open_assigned_items(self) -> list[dict]:
        self.queries += 1
        if self.error is not None:
            raise self.error
        return list(self.items)

    def create_page(self, properties: dict) -> dict:
        self.created.append(properties)
        return {'id': f'page-{len(self.created)}', 'properties': properties}

    def retrieve_database(self) -> dict:
        if self.error is not None:
            raise self.error
        return self.database

    def is_configured(self) -> bool:
        return self.configured


@pytest.fixture
def roster() -> list[Owner]:
    return [Owner('A', 'Alice'), Owner('B', 'Bob'), Owner('C', 'Cleo'), Owner('D', 'Dev')]


@pytest.fixture
def upstream_error() -> UpstreamQueryError:
    return UpstreamQueryError('Notion returned 429', status_code=429, detail={'code': 'rate_limited'})
