"""Exa adapter: semantic search, content fetch and similar-page lookup.

Docs: https://docs.exa.ai
"""

import logging
from typing import Any, Dict, List, Optional

from shopscan.constants import (
    EXA_API_URL,
    SEARCH_DEFAULT_RESULTS,
    SNIPPET_LENGTH,
    UNTITLED,
)
from shopscan.models import (
    ErrorKind,
    ProviderType,
    ScrapeData,
    ScrapeResult,
    SearchData,
    SearchHit,
    SearchResult,
)
from shopscan.scrapers.base import BaseScraper, json_object, text_field

logger = logging.getLogger(__name__)

SEARCH_TYPES = ("auto", "keyword", "neural")


def to_search_hit(item: Dict[str, Any]) -> SearchHit:
    """Map one Exa result onto the common hit shape."""
    text = text_field(item, "text")
    return SearchHit(
        title=item.get("title") or UNTITLED,
        url=item.get("url", ""),
        snippet=text[:SNIPPET_LENGTH],
        content=text,
        published_date=item.get("publishedDate"),
        author=item.get("author"),
    )


def _results(payload: Dict[str, Any]) -> list:
    results = payload.get("results") or []
    if not isinstance(results, list):
        raise TypeError(f"Expected a list of results, got {type(results).__name__}")
    return results


def _add_domain_filters(body: dict, include_domains: Optional[List[str]], exclude_domains: Optional[List[str]]) -> None:
    if include_domains:
        body["includeDomains"] = list(include_domains)
    if exclude_domains:
        body["excludeDomains"] = list(exclude_domains)


class ExaScraper(BaseScraper):
    """Semantic search backend; the only provider that supports search."""

    provider = ProviderType.EXA
    display_name = "Exa"

    status_errors = {
        401: ("Ungültiger Exa API-Key", ErrorKind.BAD_CREDENTIAL),
        402: ("Exa Credits aufgebraucht", ErrorKind.QUOTA_EXHAUSTED),
    }

    def _post(self, endpoint: str, api_key: str, body: dict):
        logger.debug(f"Exa request to /{endpoint}")
        return self.session.post(
            f"{EXA_API_URL}/{endpoint}",
            json=body,
            headers={"x-api-key": api_key, "Content-Type": "application/json"},
            timeout=self.timeout,
        )

    def _scrape(self, url: str, api_key: Optional[str], js_rendering: bool) -> ScrapeResult:
        response = self._post("contents", api_key, {"urls": [url], "text": True})
        if not response.ok:
            return self._http_failure(ScrapeResult, response)

        results = _results(json_object(response))
        if not results or not isinstance(results[0], dict):
            return self._failure(ScrapeResult, "Keine Inhalte gefunden", ErrorKind.CONTENT)

        first = results[0]
        return ScrapeResult(
            success=True,
            provider=self.provider,
            data=ScrapeData(
                markdown=text_field(first, "text"),
                url=first.get("url") or url,
                title=first.get("title") or None,
            ),
        )

    def search(
        self,
        query: str,
        api_key: Optional[str] = None,
        num_results: int = SEARCH_DEFAULT_RESULTS,
        include_domains: Optional[List[str]] = None,
        exclude_domains: Optional[List[str]] = None,
        search_type: str = "auto",
        use_autoprompt: bool = True,
        start_published_date: Optional[str] = None,
        end_published_date: Optional[str] = None,
    ) -> SearchResult:
        """Search the web and return hits with their full text.

        Args:
            query: Search query
            api_key: Exa API key
            num_results: Number of hits to request
            include_domains: Restrict hits to these domains
            exclude_domains: Drop hits from these domains
            search_type: One of auto, keyword, neural
            use_autoprompt: Let Exa rewrite the query
            start_published_date: ISO date lower bound
            end_published_date: ISO date upper bound

        Returns:
            SearchResult, never raises
        """
        if not api_key:
            return SearchResult.failure(self.provider, self.missing_key_error, ErrorKind.CONFIGURATION)
        if search_type not in SEARCH_TYPES:
            return SearchResult.failure(
                self.provider, f"Ungültiger Suchtyp: {search_type}", ErrorKind.VALIDATION
            )

        body = {
            "query": query,
            "numResults": num_results or SEARCH_DEFAULT_RESULTS,
            "type": search_type,
            "useAutoprompt": use_autoprompt,
            "contents": {"text": True},
        }
        _add_domain_filters(body, include_domains, exclude_domains)
        if start_published_date:
            body["startPublishedDate"] = start_published_date
        if end_published_date:
            body["endPublishedDate"] = end_published_date

        return self._guarded(SearchResult, self._run_search, "search", api_key, body, query)

    def find_similar(
        self,
        url: str,
        api_key: Optional[str] = None,
        num_results: int = SEARCH_DEFAULT_RESULTS,
        include_domains: Optional[List[str]] = None,
        exclude_domains: Optional[List[str]] = None,
    ) -> SearchResult:
        """Find pages similar to the given URL."""
        if not api_key:
            return SearchResult.failure(self.provider, self.missing_key_error, ErrorKind.CONFIGURATION)

        body = {
            "url": url,
            "numResults": num_results or SEARCH_DEFAULT_RESULTS,
            "contents": {"text": True},
        }
        _add_domain_filters(body, include_domains, exclude_domains)

        return self._guarded(SearchResult, self._run_search, "findSimilar", api_key, body, f"Similar to: {url}")

    def _run_search(self, endpoint: str, api_key: str, body: dict, query: str) -> SearchResult:
        response = self._post(endpoint, api_key, body)
        if not response.ok:
            return self._http_failure(SearchResult, response)

        results = _results(json_object(response))
        hits =[to_search_hit(item) for item in results if isinstance(item, dict)]
        return SearchResult(
            success=True,
            provider=self.provider,
            data=SearchData(results=hits, query=query, total_results=len(hits)),
        )
