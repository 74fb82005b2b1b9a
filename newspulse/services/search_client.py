import logging

import requests

logger = logging.getLogger(__name__)

SEARCH_API_HOST = 'google-search74.p.rapidapi.com'


class SearchAPIError(Exception):
    """Raised when the web search collaborator cannot produce results."""


class WebSearchClient:
    """Google search results via RapidAPI, used as chat context."""

    def __init__(self, api_key, timeout=10, limit=5, session=None):
        self.api_key = api_key
        self.timeout = timeout
        self.limit = limit
        self.session = session or requests.Session()

    def search(self, query):
        """Return the list of ``{title, description, ...}`` results for ``query``."""
        if not self.api_key:
            raise SearchAPIError("RAPIDAPI_KEY not set in environment")

        try:
            response = self.session.get(
                f"https://{SEARCH_API_HOST}/",
                params={"query": query, "limit": self.limit, "related_keywords": "true"},
                headers={
                    "x-rapidapi-key": self.api_key,
                    "x-rapidapi-host": SEARCH_API_HOST,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Search API request error for '{query}': {e}")
            raise SearchAPIError(f"Search request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Failed to parse search API response: {response.text[:500]}")
            raise SearchAPIError("Failed to parse API response") from e

        results = data.get('results') if isinstance(data, dict) else None
        if results is None:
            logger.error(f"Unexpected search API response structure: {data}")
            return []

        logger.info(f"Search for '{query}' returned {len(results)} results")
        return results
