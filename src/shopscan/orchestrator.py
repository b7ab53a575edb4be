"""Scrape and search orchestration across providers.

A scrape either goes to one explicitly chosen provider or walks the
configured fallback chain in order, stopping at the first success. Calls
are strictly sequential: each attempt may consume paid quota.
"""

import logging
from typing import Dict, Iterable, List, Optional, Union
from urllib.parse import urlparse

import requests

from shopscan.config import Config, ProviderCredentials
from shopscan.constants import SEARCH_DEFAULT_RESULTS, SEARCH_MAX_RESULTS, SEARCH_MIN_RESULTS
from shopscan.models import ErrorKind, ProviderType, ScrapeResult, SearchResult
from shopscan.providers import FALLBACK_ORDER, get_provider_config
from shopscan.scrapers import BaseScraper, ExaScraper, JinaScraper, NativeScraper, ScrapingAntScraper

logger = logging.getLogger(__name__)

ProviderLike = Union[ProviderType, str]

ALL_FAILED_ERROR = "Alle Provider sind fehlgeschlagen"
FIRECRAWL_SEPARATE_ERROR = "Firecrawl wird über einen separaten Agent-Job verarbeitet"


def validate_url(url: Optional[str]) -> Optional[str]:
    """Return an error message for anything but an absolute http(s) URL."""
    if not url or not url.strip():
        return "URL erforderlich"
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return "Ungültige URL"
    if parsed.scheme not in ("http", "https"):
        return "Nur HTTP und HTTPS URLs werden unterstützt"
    if not parsed.netloc:
        return "Ungültige URL"
    return None


def _validate_num_results(num_results: int) -> Optional[str]:
    if (
        isinstance(num_results, bool)
        or not isinstance(num_results, int)
        or not SEARCH_MIN_RESULTS <= num_results <= SEARCH_MAX_RESULTS
    ):
        return (
            f"Anzahl der Ergebnisse muss zwischen {SEARCH_MIN_RESULTS} "
            f"und {SEARCH_MAX_RESULTS} liegen"
        )
    return None


class ScrapeOrchestrator:
    """Routes scrape, search and find-similar calls to the provider adapters."""

    def __init__(
        self,
        credentials: Optional[ProviderCredentials] = None,
        config: Optional[Config] = None,
        session: Optional[requests.Session] = None,
        adapters: Optional[Dict[ProviderType, BaseScraper]] = None,
        fallback_order: Optional[Iterable[ProviderLike]] = None,
    ):
        """Initialize the orchestrator.

        Args:
            credentials: Provider credentials; read from the environment on
                every call when None
            config: Runtime configuration shared by the adapters
            session: HTTP session shared by the adapters
            adapters: Adapter per provider (defaults to the built-in ones)
            fallback_order: Scrape fallback order (defaults to the registry's)
        """
        self._credentials = credentials
        self.config = config or Config()

        if adapters is None:
            session = session or requests.Session()
            adapters = {
                adapter.provider: adapter
                for adapter in (
                    JinaScraper(session, self.config),
                    ScrapingAntScraper(session, self.config),
                    ExaScraper(session, self.config),
                    NativeScraper(session, self.config),
                )
            }
        self.adapters = adapters

        order = fallback_order if fallback_order is not None else FALLBACK_ORDER["scrape"]
        self.fallback_order = [ProviderType(provider) for provider in order]

    def credentials(self) -> ProviderCredentials:
        if self._credentials is not None:
            return self._credentials
        return ProviderCredentials.from_env()

    def is_provider_configured(
        self,
        provider: ProviderLike,
        credentials: Optional[ProviderCredentials] = None,
    ) -> bool:
        """A provider is configured if it needs no credential or has one."""
        provider = ProviderType(provider)
        if not get_provider_config(provider).requires_api_key:
            return True
        credentials = credentials or self.credentials()
        return credentials.get(provider.value) is not None

    def configured_providers(self) -> List[ProviderType]:
        credentials = self.credentials()
        return [p for p in ProviderType if self.is_provider_configured(p, credentials)]

    def fallback_chain(self, credentials: Optional[ProviderCredentials] = None) -> List[ProviderType]:
        """Configured providers in fallback order; never empty."""
        credentials = credentials or self.credentials()
        chain = [p for p in self.fallback_order if self.is_provider_configured(p, credentials)]
        if not chain:
            # Local fetch is the last resort
            chain = [ProviderType.NATIVE]
        return chain

    def scrape(
        self,
        url: str,
        provider: Optional[ProviderLike] = None,
        enable_fallback: bool = True,
        js_rendering: bool = False,
    ) -> ScrapeResult:
        """Scrape a URL with one provider or the fallback chain.

        Args:
            url: Absolute http(s) URL
            provider: Explicit provider; disables fallback
            enable_fallback: Walk the whole chain (only the first provider otherwise)
            js_rendering: Request JS rendering where supported

        Returns:
            ScrapeResult; never raises
        """
        if provider is not None:
            try:
                provider = ProviderType(provider)
            except ValueError:
                return ScrapeResult.failure(
                    ProviderType.NATIVE, f"Unbekannter Provider: {provider}", ErrorKind.VALIDATION
                )

        error = validate_url(url)
        if error:
            return ScrapeResult.failure(provider or ProviderType.NATIVE, error, ErrorKind.VALIDATION)
        url = url.strip()

        credentials = self.credentials()

        if provider is not None:
            result = self._scrape_with(provider, url, credentials, js_rendering)
            result.fallback_used = False
            return result

        chain = self.fallback_chain(credentials)
        logger.debug(f"Fallback chain for {url}: {[p.value for p in chain]}")

        last_result = None
        attempts = 0
        for index, current in enumerate(chain):
            attempts += 1
            result = self._scrape_with(current, url, credentials, js_rendering)

            if result.success:
                result.fallback_used = index > 0
                if index > 0:
                    logger.info(f"Scraped {url} with fallback provider {current.value}")
                return result

            last_result = result
            if not enable_fallback:
                break
            if index + 1 < len(chain):
                logger.info(
                    f"Provider {current.value} failed for {url}, "
                    f"falling back to {chain[index + 1].value}"
                )

        return ScrapeResult(
            success=False,
            provider=last_result.provider,
            error=last_result.error or ALL_FAILED_ERROR,
            error_kind=last_result.error_kind,
            fallback_used=attempts > 1,
        )

    def scrape_many(
        self,
        urls: Iterable[str],
        provider: Optional[ProviderLike] = None,
        enable_fallback: bool = True,
        js_rendering: bool = False,
    ) -> List[ScrapeResult]:
        """Scrape several URLs one after another.

        Each URL gets its own result in input order; a failing URL does not
        stop the others.
        """
        results = []
        for url in urls:
            results.append(
                self.scrape(url, provider=provider, enable_fallback=enable_fallback, js_rendering=js_rendering)
            )
        succeeded = sum(1 for result in results if result.success)
        logger.info(f"Scraped {succeeded}/{len(results)} URLs")
        return results

    def _scrape_with(
        self,
        provider: ProviderType,
        url: str,
        credentials: ProviderCredentials,
        js_rendering: bool,
    ) -> ScrapeResult:
        adapter = self.adapters.get(provider)
        if adapter is None:
            # Firecrawl runs as a long-polling agent job
            return ScrapeResult.failure(provider, FIRECRAWL_SEPARATE_ERROR, ErrorKind.UNSUPPORTED)

        return adapter.scrape_url(url, api_key=credentials.get(provider.value), js_rendering=js_rendering)

    def search(
        self,
        query: str,
        provider: ProviderLike = ProviderType.EXA,
        num_results: int = SEARCH_DEFAULT_RESULTS,
        include_domains: Optional[List[str]] = None,
        exclude_domains: Optional[List[str]] = None,
        **options,
    ) -> SearchResult:
        """Search the web. Only Exa supports search.

        Extra keyword options (search_type, use_autoprompt, published-date
        bounds) are passed to the search backend.
        """
        try:
            provider = ProviderType(provider)
        except ValueError:
            return SearchResult.failure(
                ProviderType.EXA, f"Provider {provider} unterstützt keine Suche", ErrorKind.UNSUPPORTED
            )

        if not query or not query.strip():
            return SearchResult.failure(provider, "Suchanfrage ist erforderlich", ErrorKind.VALIDATION)
        if num_results is None:
            num_results = SEARCH_DEFAULT_RESULTS
        error = _validate_num_results(num_results)
        if error:
            return SearchResult.failure(provider, error, ErrorKind.VALIDATION)

        adapter = self.adapters.get(provider)
        if provider != ProviderType.EXA or adapter is None:
            return SearchResult.failure(
                provider, f"Provider {provider.value} unterstützt keine Suche", ErrorKind.UNSUPPORTED
            )

        return adapter.search(
            query.strip(),
            api_key=self.credentials().get(provider.value),
            num_results=num_results,
            include_domains=include_domains,
            exclude_domains=exclude_domains,
            **options,
        )

    def find_similar(
        self,
        url: str,
        num_results: int = SEARCH_DEFAULT_RESULTS,
        include_domains: Optional[List[str]] = None,
        exclude_domains: Optional[List[str]] = None,
    ) -> SearchResult:
        """Find pages similar to a URL; always uses Exa."""
        if not url or not url.strip():
            return SearchResult.failure(
                ProviderType.EXA, "URL ist für die Ähnlichkeitssuche erforderlich", ErrorKind.VALIDATION
            )
        if num_results is None:
            num_results = SEARCH_DEFAULT_RESULTS
        error = validate_url(url) or _validate_num_results(num_results)
        if error:
            return SearchResult.failure(ProviderType.EXA, error, ErrorKind.VALIDATION)

        adapter = self.adapters.get(ProviderType.EXA)
        if adapter is None:
            return SearchResult.failure(
                ProviderType.EXA, "Provider exa unterstützt keine Suche", ErrorKind.UNSUPPORTED
            )

        return adapter.find_similar(
            url.strip(),
            api_key=self.credentials().get(ProviderType.EXA.value),
            num_results=num_results,
            include_domains=include_domains,
            exclude_domains=exclude_domains,
        )
