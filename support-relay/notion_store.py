"""
Notion API client for the ticket database.
Requires an internal integration token with access to the database.
"""
import logging
from typing import List, Dict, Optional

import requests

import config

logger = logging.getLogger(__name__)


class UpstreamQueryError(Exception):
    """Raised when a Notion request fails (network, auth, rate limit, bad request)."""

    def __init__(self, message: str, status_code: Optional[int] = None, detail=None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class NotionStore:
    """Client for the Notion REST API, scoped to one ticket database."""

    PAGE_SIZE = 100

    def __init__(self, token: Optional[str] = None, database_id: Optional[str] = None,
                 api_url: Optional[str] = None, notion_version: Optional[str] = None,
                 status_property: Optional[str] = None, owner_property: Optional[str] = None,
                 done_status: Optional[str] = None, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        self.token = token if token is not None else config.NOTION_TOKEN
        self.database_id = database_id if database_id is not None else config.DATABASE_ID
        self.api_url = (api_url or config.NOTION_API_URL).rstrip('/')
        self.notion_version = notion_version or config.NOTION_VERSION
        self.status_property = status_property or config.NOTION_STATUS_PROPERTY
        self.owner_property = owner_property or config.NOTION_OWNER_PROPERTY
        self.done_status = done_status or config.NOTION_DONE_STATUS
        self.timeout = timeout if timeout is not None else config.NOTION_TIMEOUT
        self.session = session or requests.Session()

    def _headers(self) -> dict:
        return {
            'Authorization': f'Bearer {self.token}',
            'Notion-Version': self.notion_version,
            'Content-Type': 'application/json'
        }

    def _request(self, method: str, path: str, payload: Optional[dict] = None) -> dict:
        url = f"{self.api_url}{path}"
        try:
            resp = self.session.request(method, url, headers=self._headers(), json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise UpstreamQueryError(f"Notion request failed: {e}") from e

        if not resp.ok:
            try:
                detail = resp.json()
            except ValueError:
                detail = resp.text
            message = detail.get('message') if isinstance(detail, dict) else None
            raise UpstreamQueryError(
                f"Notion returned {resp.status_code} for {method} {path}: {message or 'request rejected'}",
                status_code=resp.status_code,
                detail=detail
            )

        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamQueryError(
                f"Notion returned a non-JSON body for {method} {path}",
                status_code=resp.status_code,
                detail=resp.text
            ) from e

    def open_assigned_filter(self) -> dict:
        """Filter for tickets that are not Done and have someone assigned."""
        return {
            'and': [
                {'property': self.status_property, 'select': {'does_not_equal': self.done_status}},
                {'property': self.owner_property, 'people': {'is_not_empty': True}}
            ]
        }

    def query_open_assigned_items(self) -> List[Dict]:
        """
        Fetch every open, assigned ticket in the database.
        Returns list of dicts with: owner_id (the first assigned person)
        """
        path = f"/databases/{self.database_id}/query"
        payload = {'filter': self.open_assigned_filter(), 'page_size': self.PAGE_SIZE}

        items = []
        while True:
            data = self._request('POST', path, payload)
            for page in data.get('results', []):
                people = page.get('properties', {}).get(self.owner_property, {}).get('people') or []
                if people:
                    items.append({'owner_id': people[0].get('id')})
            if not data.get('has_more') or not data.get('next_cursor'):
                break
            payload = dict(payload, start_cursor=data['next_cursor'])

        logger.debug("[Notion] %d open assigned tickets", len(items))
        return items

    def create_page(self, properties: dict) -> dict:
        """Create a ticket page in the database."""
        data = {
            'parent': {'database_id': self.database_id},
            'properties': properties
        }
        page = self._request('POST', '/pages', data)
        logger.info("[Notion] Created page %s", page.get('id'))
        return page

    def retrieve_database(self) -> dict:
        """Fetch the database object (schema and properties)."""
        return self._request('GET', f"/databases/{self.database_id}")

    def is_configured(self) -> bool:
        """Check if Notion credentials are configured."""
        return all([self.token, self.database_id])
